import pytest
from bson import ObjectId
from pydantic import ValidationError

import handlers
from tests.fakes import make_product, make_user
from tools import build_tools

PRODUCT_ARGS = dict(name="Monitor 27", description="IPS 4K", price=349.0, stock=30, sku="MON-27", created_at=1700000000000, active=True)


def _tools(db):
    return {t.name: t for t in build_tools(db)}


def test_tool_catalog(db):
    assert set(_tools(db)) == {
        "list_users", "get_user_by_full_name", "get_user_by_email", "list_clients", "list_sales",
        "list_products", "get_product_by_sku", "list_claims", "create_product", "update_product",
    }
    for t in build_tools(db):
        assert t.description


def test_list_products_forwards_to_handler(db):
    handlers.create_product(db, make_product())
    result = _tools(db)["list_products"].invoke({})
    assert [p["name"] for p in result] == ["Laptop Pro 14"]


def test_full_name_lookup_tool(db):
    handlers.create_user(db, make_user())
    tools = _tools(db)
    assert tools["get_user_by_full_name"].invoke({"name": "Ana", "surname": "García"})["email"] == "ana@example.com"
    assert tools["get_user_by_full_name"].invoke({"name": "Pedro", "surname": "Soto"}) is None


def test_create_product_tool_writes_once(db):
    product_id = _tools(db)["create_product"].invoke(PRODUCT_ARGS)
    assert db.products.count_documents({}) == 1
    assert handlers.get_product(db, product_id)["sku"] == "MON-27"


def test_update_product_tool(db):
    product_id = handlers.create_product(db, make_product())
    _tools(db)["update_product"].invoke({**PRODUCT_ARGS, "product_id": product_id})
    stored = handlers.get_product(db, product_id)
    assert stored["name"] == "Monitor 27"
    assert stored["price"] == 349.0


def test_missing_field_is_rejected_before_handler(db):
    args = dict(PRODUCT_ARGS)
    del args["price"]
    with pytest.raises(ValidationError):
        _tools(db)["create_product"].invoke(args)
    assert db.products.count_documents({}) == 0


def test_unknown_field_is_rejected(db):
    with pytest.raises(ValidationError):
        _tools(db)["create_product"].invoke({**PRODUCT_ARGS, "color": "rojo"})
    assert db.products.count_documents({}) == 0


def test_update_rejects_malformed_id(db):
    with pytest.raises(ValidationError):
        _tools(db)["update_product"].invoke({**PRODUCT_ARGS, "product_id": "123"})


def test_update_unknown_id_is_silent(db):
    assert _tools(db)["update_product"].invoke({**PRODUCT_ARGS, "product_id": str(ObjectId())}) is None
    assert db.products.count_documents({}) == 0


def test_string_typed_numbers_and_flags_are_rejected(db):
    wrong_types = {**PRODUCT_ARGS, "price": "12.5", "stock": "7", "created_at": "1", "active": "yes"}
    with pytest.raises(ValidationError):
        _tools(db)["create_product"].invoke(wrong_types)
    for field in ("price", "stock", "created_at", "active"):
        with pytest.raises(ValidationError):
            _tools(db)["create_product"].invoke({**PRODUCT_ARGS, field: str(PRODUCT_ARGS[field])})
    assert db.products.count_documents({}) == 0


def test_integer_price_is_accepted(db):
    _tools(db)["create_product"].invoke({**PRODUCT_ARGS, "price": 349})
    assert db.products.find_one({})["price"] == 349
