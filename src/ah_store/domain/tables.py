"""Key schemas of the entity store tables.

Every table has a partition key; tables keyed by a single attribute store an
empty sort key.
"""

from src.ah_common.enums import StoreTable

TABLE_KEYS: dict[StoreTable, tuple[str, str | None]] = {
    StoreTable.ITEMS: ("sellerId", "id"),
    StoreTable.BIDS: ("buyerId", "id"),
    StoreTable.PURCHASES: ("buyerId", "id"),
    StoreTable.BUYERS: ("id", None),
    StoreTable.SELLERS: ("id", None),
}


def key_of(table: StoreTable, doc: dict) -> dict[str, str]:
    """Extract the primary key attributes of ``doc`` for ``table``."""
    pk_name, sk_name = TABLE_KEYS[table]
    key = {pk_name: doc[pk_name]}
    if sk_name is not None:
        key[sk_name] = doc[sk_name]
    return key


def key_tuple(table: StoreTable, key: dict[str, str]) -> tuple[str, str]:
    """(partition value, sort value) for storage; raises ValueError on a malformed key."""
    pk_name, sk_name = TABLE_KEYS[table]
    expected = {pk_name} if sk_name is None else {pk_name, sk_name}
    if set(key) != expected:
        raise ValueError(f"Key for {table.value} must have exactly {sorted(expected)}, got {sorted(key)}")
    pk = str(key[pk_name])
    sk = str(key[sk_name]) if sk_name is not None else ""
    return pk, sk
