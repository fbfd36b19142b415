"""Tests for ah_store.domain.expressions and ah_store.domain.tables."""

import pytest

from src.ah_common.enums import StoreTable
from src.ah_store.domain.expressions import (
    MAX_TRANSACTION_OPS,
    AddTo,
    And,
    AppendTo,
    AttrEq,
    AttrExists,
    AttrGt,
    AttrGte,
    AttrIn,
    AttrLt,
    AttrNe,
    AttrNotExists,
    Condition,
    DeleteOp,
    IsEmpty,
    Not,
    Or,
    PutOp,
    RemoveAttr,
    SetAttr,
    TransactionIntent,
    UpdateOp,
    apply_actions,
    condition_holds,
    next_document,
    target_of,
)
from src.ah_store.domain.tables import key_of, key_tuple

DOC = {
    "sellerId": "s1",
    "id": "i1",
    "state": "ACTIVE",
    "endDate": 1000,
    "pastBids": [],
    "currentBid": {"buyerId": "b1", "id": "x1"},
}


class TestConditions:
    def test_attr_eq(self) -> None:
        assert AttrEq("state", "ACTIVE").evaluate(DOC)
        assert not AttrEq("state", "INACTIVE").evaluate(DOC)
        assert not AttrEq("state", "ACTIVE").evaluate(None)

    def test_incomplete_condition_cannot_be_built(self) -> None:
        class NoEvaluate(Condition):
            pass

        with pytest.raises(TypeError):
            NoEvaluate()

    def test_attr_eq_compares_maps(self) -> None:
        assert AttrEq("currentBid", {"buyerId": "b1", "id": "x1"}).evaluate(DOC)
        assert not AttrEq("currentBid", {"buyerId": "b2", "id": "x1"}).evaluate(DOC)

    def test_attr_ne_true_when_absent(self) -> None:
        assert AttrNe("missing", 1).evaluate(DOC)
        assert not AttrNe("state", "ACTIVE").evaluate(DOC)

    def test_numeric_comparisons(self) -> None:
        assert AttrGt("endDate", 999).evaluate(DOC)
        assert not AttrGt("endDate", 1000).evaluate(DOC)
        assert AttrGte("endDate", 1000).evaluate(DOC)
        assert AttrLt("endDate", 1001).evaluate(DOC)

    def test_comparison_on_missing_attr_is_false(self) -> None:
        assert not AttrGte("fund", 0).evaluate({"id": "b1"})
        assert not AttrLt("fund", 10).evaluate(None)

    def test_comparison_on_non_int_is_false(self) -> None:
        assert not AttrGt("state", 0).evaluate(DOC)

    def test_attr_in(self) -> None:
        assert AttrIn("state", ("INACTIVE", "ACTIVE")).evaluate(DOC)
        assert not AttrIn("state", ("FAILED",)).evaluate(DOC)

    def test_exists(self) -> None:
        assert AttrExists("currentBid").evaluate(DOC)
        assert AttrNotExists("soldBid").evaluate(DOC)
        assert AttrNotExists("id").evaluate(None)

    def test_none_value_counts_as_absent(self) -> None:
        assert AttrNotExists("currentBid").evaluate({"currentBid": None})

    def test_is_empty(self) -> None:
        assert IsEmpty("pastBids").evaluate(DOC)
        assert IsEmpty("missing").evaluate(DOC)
        assert not IsEmpty("pastBids").evaluate({"pastBids": [1]})

    def test_combinators(self) -> None:
        active = AttrEq("state", "ACTIVE")
        assert And(active, AttrExists("currentBid")).evaluate(DOC)
        assert not And(active, AttrNotExists("currentBid")).evaluate(DOC)
        assert Or(AttrEq("state", "FAILED"), active).evaluate(DOC)
        assert Not(AttrEq("state", "FAILED")).evaluate(DOC)

    def test_no_condition_always_holds(self) -> None:
        assert condition_holds(None, None)
        assert condition_holds(None, DOC)


class TestApplyActions:
    def test_set_and_remove(self) -> None:
        new = apply_actions(DOC, {"sellerId": "s1", "id": "i1"}, (
            SetAttr("state", "ARCHIVED"),
            RemoveAttr("currentBid"),
        ))
        assert new["state"] == "ARCHIVED"
        assert "currentBid" not in new
        assert DOC["state"] == "ACTIVE"  # input untouched

    def test_set_none_removes(self) -> None:
        new = apply_actions(DOC, {"sellerId": "s1", "id": "i1"}, (SetAttr("endDate", None),))
        assert "endDate" not in new

    def test_add_to_missing_starts_from_zero(self) -> None:
        new = apply_actions(None, {"id": "b1"}, (AddTo("fund", 50), AddTo("fundOnHold", 0)))
        assert new == {"id": "b1", "fund": 50, "fundOnHold": 0}

    def test_append_to(self) -> None:
        ref = {"buyerId": "b2", "id": "x2"}
        new = apply_actions(DOC, {"sellerId": "s1", "id": "i1"}, (AppendTo("pastBids", (ref,)),))
        assert new["pastBids"] == [ref]

    def test_add_to_non_numeric_rejected(self) -> None:
        with pytest.raises(ValueError):
            apply_actions(DOC, {"sellerId": "s1", "id": "i1"}, (AddTo("state", 1),))

    def test_key_attributes_are_immutable(self) -> None:
        with pytest.raises(ValueError):
            apply_actions(DOC, {"sellerId": "s1", "id": "i1"}, (SetAttr("id", "other"),))


class TestTransactionIntent:
    def _op(self, n: int, label: str | None = None) -> UpdateOp:
        return UpdateOp(
            StoreTable.BUYERS, {"id": f"b{n}"}, (AddTo("fund", 1),), label=label or f"op{n}"
        )

    def test_add_is_chainable_and_keeps_order(self) -> None:
        intent = TransactionIntent().add(self._op(1)).add(self._op(2))
        assert intent.labels == ["op1", "op2"]

    def test_empty_intent_rejected(self) -> None:
        with pytest.raises(ValueError):
            TransactionIntent().validate()

    def test_duplicate_labels_rejected(self) -> None:
        intent = TransactionIntent([self._op(1, "x"), self._op(2, "x")])
        with pytest.raises(ValueError):
            intent.validate()

    def test_same_target_twice_rejected(self) -> None:
        intent = TransactionIntent([self._op(1, "a"), self._op(1, "b")])
        with pytest.raises(ValueError):
            intent.validate()

    def test_too_many_ops_rejected(self) -> None:
        intent = TransactionIntent([self._op(n) for n in range(MAX_TRANSACTION_OPS + 1)])
        with pytest.raises(ValueError):
            intent.validate()

    def test_target_of_put_uses_doc_key(self) -> None:
        op = PutOp(StoreTable.BIDS, {"buyerId": "b1", "id": "x1", "amount": 5})
        assert target_of(op) == ("bids", "b1", "x1")

    def test_next_document(self) -> None:
        put = PutOp(StoreTable.BUYERS, {"id": "b1", "fund": 1})
        delete = DeleteOp(StoreTable.BUYERS, {"id": "b1"})
        assert next_document(put, None) == {"id": "b1", "fund": 1}
        assert next_document(delete, {"id": "b1"}) is None


class TestTables:
    def test_key_of_composite(self) -> None:
        assert key_of(StoreTable.ITEMS, DOC) == {"sellerId": "s1", "id": "i1"}

    def test_key_of_single(self) -> None:
        assert key_of(StoreTable.BUYERS, {"id": "b1", "fund": 3}) == {"id": "b1"}

    def test_key_tuple_single_key_has_empty_sort(self) -> None:
        assert key_tuple(StoreTable.SELLERS, {"id": "s1"}) == ("s1", "")

    def test_malformed_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            key_tuple(StoreTable.ITEMS, {"id": "i1"})
