"""
Tests for the cart aggregate
"""

import pytest
from bson import ObjectId

from cart import MAX_QUANTITY, Cart, check_object_id
from errors import InvalidArgument, NotFound

PRODUCT_X = "64b7f0c2a1b2c3d4e5f60001"
PRODUCT_Y = "64b7f0c2a1b2c3d4e5f60002"
PRODUCT_Z = "64b7f0c2a1b2c3d4e5f60003"


class TestAddItem:
    def test_new_product_appends_line(self):
        cart = Cart().add_item(PRODUCT_X, 2)
        assert cart.items == [{"product_id": PRODUCT_X, "quantity": 2}]

    def test_default_quantity_is_one(self):
        assert Cart().add_item(PRODUCT_X).quantity_of(PRODUCT_X) == 1

    def test_same_product_merges(self):
        cart = Cart()
        cart.add_item(PRODUCT_X, 2)
        cart.add_item(PRODUCT_X, 3)
        assert cart.items == [{"product_id": PRODUCT_X, "quantity": 5}]

    def test_uppercase_id_merges_with_lowercase(self):
        cart = Cart().add_item(PRODUCT_X, 1).add_item(PRODUCT_X.upper(), 1)
        assert len(cart) == 1
        assert cart.quantity_of(PRODUCT_X) == 2

    @pytest.mark.parametrize("qty", [0, -3, 1.5, "2", True])
    def test_bad_quantity_is_rejected(self, qty):
        cart = Cart()
        with pytest.raises(InvalidArgument):
            cart.add_item(PRODUCT_X, qty)
        assert len(cart) == 0

    def test_malformed_product_id_is_rejected(self):
        with pytest.raises(InvalidArgument):
            Cart().add_item("not-an-id", 1)

    def test_quantity_above_max_is_rejected(self):
        with pytest.raises(InvalidArgument):
            Cart().add_item(PRODUCT_X, 10**20)

    def test_merged_quantity_above_max_is_rejected(self):
        cart = Cart().add_item(PRODUCT_X, MAX_QUANTITY)
        with pytest.raises(InvalidArgument):
            cart.add_item(PRODUCT_X, 1)
        assert cart.quantity_of(PRODUCT_X) == MAX_QUANTITY


class TestRemoveItem:
    def test_removes_line(self):
        cart = Cart().add_item(PRODUCT_X).add_item(PRODUCT_Y)
        cart.remove_item(PRODUCT_X)
        assert PRODUCT_X not in cart
        assert PRODUCT_Y in cart

    def test_absent_product_is_noop(self):
        cart = Cart().add_item(PRODUCT_X, 4)
        before = cart.items
        assert cart.remove_item(PRODUCT_Y) is cart
        assert cart.items == before


class TestUpdateQuantity:
    def test_sets_exact_quantity(self):
        cart = Cart().add_item(PRODUCT_Z, 7)
        cart.update_quantity(PRODUCT_Z, 2)
        assert cart.quantity_of(PRODUCT_Z) == 2

    def test_zero_is_rejected(self):
        cart = Cart().add_item(PRODUCT_Z, 7)
        with pytest.raises(InvalidArgument):
            cart.update_quantity(PRODUCT_Z, 0)
        assert cart.quantity_of(PRODUCT_Z) == 7

    def test_above_max_is_rejected(self):
        cart = Cart().add_item(PRODUCT_Z, 1)
        with pytest.raises(InvalidArgument):
            cart.update_quantity(PRODUCT_Z, MAX_QUANTITY + 1)

    def test_missing_item_is_not_found(self):
        with pytest.raises(NotFound):
            Cart().update_quantity(PRODUCT_Z, 1)


class TestSummaryAndDocument:
    def test_summary_counts(self):
        cart = Cart(id="64b7f0c2a1b2c3d4e5f6aaaa").add_item(PRODUCT_X, 2).add_item(PRODUCT_Y, 3)
        summary = cart.to_summary()
        assert summary["id"] == "64b7f0c2a1b2c3d4e5f6aaaa"
        assert summary["lineCount"] == 2
        assert summary["totalQuantity"] == 5
        assert "total" not in summary

    def test_empty_cart_summary(self):
        summary = Cart().to_summary()
        assert summary["items"] == []
        assert summary["lineCount"] == 0

    def test_document_round_trip(self):
        cart = Cart(id=str(ObjectId()))
        for pid, qty in [(PRODUCT_X, 1), (PRODUCT_Y, 4), (PRODUCT_Z, 9)]:
            cart.add_item(pid, qty)
        doc = cart.to_document()
        assert isinstance(doc["_id"], ObjectId)

        loaded = Cart.from_document(doc)
        assert loaded.id == cart.id
        assert loaded.items == cart.items
        assert loaded.created_at == cart.created_at

    def test_duplicate_lines_merge_on_load(self):
        doc = {
            "_id": ObjectId(),
            "items": [
                {"product_id": PRODUCT_X, "quantity": 1},
                {"product_id": PRODUCT_X, "quantity": 2},
            ],
        }
        loaded = Cart.from_document(doc)
        assert loaded.items == [{"product_id": PRODUCT_X, "quantity": 3}]


class TestCheckObjectId:
    def test_accepts_object_id(self):
        oid = ObjectId()
        assert check_object_id(oid) == str(oid)

    @pytest.mark.parametrize("value", ["", "123", "zzzzzzzzzzzzzzzzzzzzzzzz", None, 12])
    def test_rejects_malformed(self, value):
        with pytest.raises(InvalidArgument):
            check_object_id(value, "cart id")
