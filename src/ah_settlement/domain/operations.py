"""Settlement transaction participants owned by this module."""

from src.ah_common.enums import StoreTable
from src.ah_settlement.domain.models import Purchase
from src.ah_store.domain.expressions import AttrNotExists, PutOp


def put_new_purchase(purchase: Purchase, label: str = "purchase") -> PutOp:
    return PutOp(
        StoreTable.PURCHASES, purchase.to_doc(), condition=AttrNotExists("id"), label=label
    )
