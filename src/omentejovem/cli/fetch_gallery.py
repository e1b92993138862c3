"""CLI command for aggregating a gallery section from the terminal.

Usage:
    python -m omentejovem.cli SECTION [OPTIONS]

Examples:
    # First page of the portfolio
    python -m omentejovem.cli portfolio

    # Third page of the 1/1 gallery, Ethereum artworks only
    python -m omentejovem.cli oneOfOne --page 3 --path minted/eth

    # Plain CMS artworks, verbose logging
    python -m omentejovem.cli editions --only-arts -v
"""

import asyncio
import sys
from argparse import ArgumentParser, Namespace

import structlog

from omentejovem.core.config import Settings, configure_logging
from omentejovem.core.dependencies import build_gallery_service, create_http_client
from omentejovem.services.aggregation.gallery import SECTION_TAGS
from omentejovem.services.exceptions import (
    FilterNotFoundError,
    GalleryError,
    InvalidSectionError,
)
from omentejovem.services.filters.engine import ChainedFilterEngine, split_path
from omentejovem.services.filters.tree import build_filter_tree

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command-line arguments."""
    parser = ArgumentParser(
        description="Aggregate a gallery section from the CMS, OpenSea and Objkt",
    )

    parser.add_argument("section", help=f"Gallery section ({', '.join(SECTION_TAGS)})")

    parser.add_argument("--page", type=int, default=1, help="1-based CMS page (default: 1)")

    parser.add_argument(
        "--only-arts",
        action="store_true",
        help="Skip on-chain artworks",
    )

    parser.add_argument(
        "--path",
        default="",
        help="Filter path applied to the result, e.g. minted/eth/year/2023",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser.parse_args(argv)


async def async_main(argv: list[str] | None = None) -> int:
    """Main CLI entry point (async).

    Returns:
        Exit code: 0 (success), 1 (error), 130 (interrupted)
    """
    args = parse_args(argv)

    settings = Settings()  # type: ignore[call-arg]
    if args.verbose:
        settings.log_level = "DEBUG"

    configure_logging(settings)

    logger.info("cli.started", section=args.section, page=args.page, only_arts=args.only_arts)

    http_client = create_http_client(settings)
    try:
        gallery_service = await build_gallery_service(settings, http_client)
        gallery = await gallery_service.request_gallery(
            args.section, page=args.page, only_arts=args.only_arts
        )

        engine = ChainedFilterEngine(
            build_filter_tree(first_year=settings.filter_first_year), gallery.images
        )
        engine.select_path(split_path(args.path))
        images = engine.visible_artworks()

        print("\n" + "=" * 60)
        print(f"Gallery: {args.section} (page {args.page} of {gallery.total_pages})")
        if args.path:
            print(f"Filter path: {args.path}")
        print("=" * 60)
        for art in images:
            print(f"{art.created_at or '-':<26} {art.nft_chain:<9} {art.name}")
        print("-" * 60)
        print(f"Artworks: {len(images)}")
        options = [child.label for child in engine.visible_children() if child.label]
        if options:
            print(f"Next filters: {', '.join(options)}")
        print("=" * 60 + "\n")

        logger.info("cli.success", artworks=len(images))
        return 0

    except (InvalidSectionError, FilterNotFoundError, GalleryError) as e:
        logger.error("cli.gallery_error", error=str(e), error_type=type(e).__name__)
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        logger.info("cli.interrupted")
        print("\nInterrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        logger.error(
            "cli.unexpected_error",
            error=str(e),
            error_type=type(e).__name__,
        )
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        return 1

    finally:
        await http_client.aclose()


def main() -> None:
    """Synchronous entry point for CLI."""
    sys.exit(asyncio.run(async_main()))


if __name__ == "__main__":
    main()
