"""Global enums — values are persisted verbatim in entity documents."""

from enum import Enum


class ItemState(str, Enum):
    INACTIVE = "INACTIVE"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"  # derived: ACTIVE with endDate elapsed, never stored
    FAILED = "FAILED"
    ARCHIVED = "ARCHIVED"


class UserRole(str, Enum):
    BUYER = "BUYER"
    SELLER = "SELLER"
    ADMIN = "ADMIN"


class StoreTable(str, Enum):
    ITEMS = "items"
    BIDS = "bids"
    PURCHASES = "purchases"
    BUYERS = "buyers"
    SELLERS = "sellers"
