from bson import ObjectId
from fastapi.testclient import TestClient

import database
import handlers
import main
from tests.fakes import ScriptedChatModel, make_client, make_order, make_product, text_turn, tool_turn

PRODUCT = dict(name="Monitor 27", description="IPS 4K", price=349.0, stock=30, sku="MON-27", created_at=1700000000000, active=True)


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"message": "Corporate Assistant Backend Running"}


def test_index_serves_chat_ui(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "chat.js" in response.text
    assert client.get("/static/chat.js").status_code == 200


def test_diagnostics_lists_collections(client, db):
    handlers.create_product(db, make_product())
    body = client.get("/test").json()
    assert body["connection_status"] == "Connected"
    assert "products" in body["collections"]


def test_create_and_list_products(client):
    response = client.post("/api/products", json=PRODUCT)
    assert response.status_code == 200
    created = response.json()
    assert ObjectId.is_valid(created["id"])

    listed = client.get("/api/products").json()
    assert [p["id"] for p in listed] == [created["id"]]


def test_update_product_replaces_fields(client):
    product_id = client.post("/api/products", json=PRODUCT).json()["id"]
    changed = {**PRODUCT, "name": "Monitor 32", "price": 499.0, "active": False}

    response = client.put(f"/api/products/{product_id}", json=changed)

    assert response.status_code == 200
    assert response.json() == {"id": product_id, **changed}


def test_update_missing_product_is_404(client):
    response = client.put(f"/api/products/{ObjectId()}", json=PRODUCT)
    assert response.status_code == 404


def test_invalid_product_body_is_422(client):
    response = client.post("/api/products", json={"name": "Sin datos"})
    assert response.status_code == 422


def test_orders_include_client(client, db):
    client_id = handlers.create_client(db, make_client())
    handlers.create_order(db, make_order(client_id, str(ObjectId())))
    orders = client.get("/api/orders").json()
    assert orders[0]["client"]["full_name"] == "Comercial Andina"


def test_seed_is_idempotent(client, db):
    first = client.post("/api/seed").json()
    assert first["inserted"]["products"] == 4
    assert first["inserted"]["orders"] == 3
    assert first["inserted"]["claims"] == 1

    second = client.post("/api/seed").json()
    assert all(v == 0 for v in second["inserted"].values())

    claims = client.get("/api/claims").json()
    assert claims[0]["client"] is not None
    assert claims[0]["order"] is not None


def test_chat_streams_text(client, db):
    handlers.create_product(db, make_product(name="Laptop Pro 14"))
    model = ScriptedChatModel([
        tool_turn(("list_products", {})),
        text_turn("Productos:\n", "- Laptop Pro 14"),
    ])
    main.app.dependency_overrides[main.get_chat_model] = lambda: model

    response = client.post("/api/chat", json={"message": "lista de productos"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "Productos:\n- Laptop Pro 14"


def test_chat_rejects_empty_message(client):
    main.app.dependency_overrides[main.get_chat_model] = lambda: ScriptedChatModel([])
    assert client.post("/api/chat", json={"message": ""}).status_code == 422
    assert client.post("/api/chat", json={}).status_code == 422


def test_database_not_configured(monkeypatch):
    monkeypatch.setattr(database, "db", None)
    with TestClient(main.app) as c:
        response = c.get("/api/products")
    assert response.status_code == 500
    assert response.json()["detail"] == "Database not configured"
