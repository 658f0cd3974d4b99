import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

import database
import handlers
from chat import ChatAgent, build_chat_model
from schemas import Claim, Client, Order, OrderItem, Product, User
from tools import build_tools

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("assistant")

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is not None:
        database.ensure_indexes(database.db)
        logger.info("[DB] Indexes ensured")
    yield


app = FastAPI(title="Corporate Assistant API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


def get_db():
    if database.db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return database.db


def get_chat_model():
    return build_chat_model()


@app.get("/")
def index():
    return FileResponse(STATIC_DIR / "index.html")


@app.get("/api/health")
def health():
    return {"message": "Corporate Assistant Backend Running"}


@app.get("/test")
def test_database():
    db = database.db
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }

    try:
        if db is not None:
            response["database"] = "✅ Available"
            response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
            response["database_name"] = db.name if hasattr(db, 'name') else "✅ Connected"
            response["connection_status"] = "Connected"
            try:
                collections = db.list_collection_names()
                response["collections"] = collections[:10]
                response["database"] = "✅ Connected & Working"
            except Exception as e:
                response["database"] = f"⚠️ Connected but Error: {str(e)[:50]}"
        else:
            response["database"] = "⚠️ Available but not initialized"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"

    return response


# -----------------------------
# Chat
# -----------------------------

class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


@app.post("/api/chat")
def chat(payload: ChatRequest, db=Depends(get_db), model=Depends(get_chat_model)):
    agent = ChatAgent(model, build_tools(db))
    logger.info("[chat] New message (%s chars)", len(payload.message))
    return StreamingResponse(agent.stream(payload.message), media_type="text/plain; charset=utf-8")


# -----------------------------
# Records
# -----------------------------

@app.get("/api/users")
def list_users(db=Depends(get_db)):
    return handlers.list_users(db)


@app.get("/api/clients")
def list_clients(db=Depends(get_db)):
    return handlers.list_clients(db)


@app.get("/api/products")
def list_products(db=Depends(get_db)):
    return handlers.list_products(db)


@app.post("/api/products")
def create_product(product: Product, db=Depends(get_db)):
    product_id = handlers.create_product(db, product)
    return {"id": product_id, **product.model_dump()}


@app.put("/api/products/{product_id}")
def update_product(product_id: str, product: Product, db=Depends(get_db)):
    if handlers.get_product(db, product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    handlers.update_product(db, product_id, product)
    return handlers.get_product(db, product_id)


@app.get("/api/orders")
def list_orders(db=Depends(get_db)):
    return handlers.list_orders_with_client(db)


@app.get("/api/claims")
def list_claims(db=Depends(get_db)):
    return handlers.list_claims_with_client_and_order(db)


# -----------------------------
# Seed demo data
# -----------------------------

@app.post("/api/seed")
def seed_demo_data(db=Depends(get_db)):
    now = int(time.time() * 1000)

    users = [
        User(name="Ana", surname="García", email="ana.garcia@example.com", role="admin", active=True, created_at=now),
        User(name="Luis", surname="Pérez", email="luis.perez@example.com", role="ventas", active=True, created_at=now),
        User(name="Marta", surname="López", email="marta.lopez@example.com", role="soporte", active=False, created_at=now),
    ]
    clients = [
        Client(full_name="Comercial Andina S.A.", email="compras@andina.example.com", phone="+51 1 555 0101", address="Av. Arequipa 1200, Lima", created_at=now, status="active"),
        Client(full_name="Distribuidora Norte", email="contacto@norte.example.com", phone="+51 44 555 0202", address="Jr. Pizarro 455, Trujillo", created_at=now, status="active"),
        Client(full_name="Tienda Sur", email="ventas@sur.example.com", phone="+51 54 555 0303", address="Calle Mercaderes 210, Arequipa", created_at=now, status="inactive"),
    ]
    products = [
        Product(name="Laptop Pro 14", description="Laptop de 14 pulgadas, 16 GB RAM", price=1299.0, stock=12, sku="LAP-14-PRO", created_at=now, active=True),
        Product(name="Monitor 27 4K", description="Monitor IPS de 27 pulgadas", price=349.0, stock=30, sku="MON-27-4K", created_at=now, active=True),
        Product(name="Teclado Mecánico", description="Teclado mecánico con switches rojos", price=89.0, stock=50, sku="TEC-MEC-RED", created_at=now, active=True),
        Product(name="Mouse Inalámbrico", description="Mouse óptico inalámbrico", price=25.0, stock=0, sku="MOU-WL-01", created_at=now, active=False),
    ]

    inserted = {"users": 0, "clients": 0, "products": 0, "orders": 0, "claims": 0}

    if db.users.count_documents({}) == 0:
        for u in users:
            handlers.create_user(db, u)
            inserted["users"] += 1

    if db.clients.count_documents({}) == 0:
        for c in clients:
            handlers.create_client(db, c)
            inserted["clients"] += 1

    if db.products.count_documents({}) == 0:
        for p in products:
            handlers.create_product(db, p)
            inserted["products"] += 1

    client_docs = handlers.list_clients(db)
    product_docs = handlers.list_products(db)
    if db.orders.count_documents({}) == 0 and product_docs:
        for i, cl in enumerate(client_docs):
            picked = product_docs[i % len(product_docs): i % len(product_docs) + 2]
            items = [
                OrderItem(
                    product_id=pr["id"],
                    product_name=pr["name"],
                    quantity=i + 1,
                    price_at_purchase=pr["price"],
                    subtotal=round(pr["price"] * (i + 1), 2),
                )
                for pr in picked
            ]
            order = Order(
                client_id=cl["id"],
                items=items,
                total_amount=round(sum(it.subtotal for it in items), 2),
                status=["paid", "shipped", "delivered"][i % 3],
                created_at=now,
            )
            order_id = handlers.create_order(db, order)
            inserted["orders"] += 1
            if i == 0 and db.claims.count_documents({}) == 0:
                claim = Claim(client_id=cl["id"], order_id=order_id, type="damaged", description="Producto llegó con la caja dañada", status="open", created_at=now)
                handlers.create_claim(db, claim)
                inserted["claims"] += 1

    logger.info("[seed] Inserted %s", inserted)
    return {"status": "ok", "message": "Seeded demo data", "inserted": inserted}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
