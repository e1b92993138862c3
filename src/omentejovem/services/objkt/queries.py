"""GraphQL documents for the Objkt v3 API."""

TOKEN_QUERY = """
query tokenGetToken($tokenId: String!, $fa2: String!, $userAddress: String) {
  token(where: { token_id: { _eq: $tokenId }, fa_contract: { _eq: $fa2 } }, limit: 1) {
    ...TokenToken
    holders(where: { holder_address: { _eq: $userAddress }, quantity: { _gt: "0" } }) {
      holder_address
      quantity
    }
  }
  collection_offers: offer_active(
    order_by: { price_xtz: desc }
    where: { collection_offer: { _eq: $fa2 } }
  ) {
    marketplace_contract
    bigmap_key
    expiry
    price
    price_xtz
    buyer {
      address
      alias
    }
    currency {
      fa_contract
      decimals
      type
      symbol
    }
  }
}

fragment TokenToken on token {
  pk
  token_id
  fa_contract
  artifact_uri
  description
  display_uri
  supply
  name
  mime
  timestamp
  fa {
    name
    path
  }
}
"""

TRANSFERS_QUERY = """
query activityEventsSimple(
  $where: event_bool_exp!
  $order_by: [event_order_by!] = {}
  $limit: Int = 100
  $offset: Int = 0
) {
  event(order_by: $order_by, limit: $limit, offset: $offset, where: $where) {
    id
    timestamp
    token_pk
    fa_contract
    ophash
    level
    creator {
      address
      alias
    }
    recipient {
      address
      alias
    }
  }
}
"""

# Newest first, ties broken by event id
DEFAULT_TRANSFER_ORDER = [{"timestamp": "desc"}, {"id": "desc"}]


def transfers_filter(fa_contract: str, token_pk: int) -> dict:
    """``where`` clause for non-reverted transfers of one NFT-like token.

    NFT-like means the token has no decimals (null or zero).
    """
    return {
        "token": {
            "_or": [
                {"decimals": {"_is_null": True}},
                {"decimals": {"_eq": 0}},
            ]
        },
        "reverted": {"_neq": True},
        "event_type": {"_eq": "transfer"},
        "fa_contract": {"_eq": fa_contract},
        "token_pk": {"_eq": token_pk},
    }
