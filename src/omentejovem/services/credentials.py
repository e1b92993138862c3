"""Resolve third-party API credentials once per process."""

import structlog

from omentejovem.core.config import Settings
from omentejovem.services.exceptions import ServiceError
from omentejovem.services.wordpress.client import ApiKeys, WordPressClient

logger = structlog.get_logger(__name__)


async def resolve_api_keys(settings: Settings, wordpress: WordPressClient) -> ApiKeys:
    """Build the ApiKeys passed to the upstream clients.

    Values set in the environment win. Anything missing is looked up in the
    CMS ``api-keys`` posts. A CMS failure is logged and leaves the value
    empty so the site still serves plain artworks.
    """
    opensea = settings.opensea_api_key
    email = settings.contact_email

    if opensea and email:
        return ApiKeys(opensea=opensea, email=email)

    try:
        cms_keys = await wordpress.fetch_api_keys()
    except ServiceError as e:
        logger.error(
            "credentials.cms_lookup_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        cms_keys = ApiKeys()

    keys = ApiKeys(opensea=opensea or cms_keys.opensea, email=email or cms_keys.email)
    logger.info(
        "credentials.resolved",
        opensea_key_present=bool(keys.opensea),
        email_present=bool(keys.email),
    )
    return keys
