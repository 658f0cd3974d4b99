"""
Query and mutation handlers.

Each handler takes the database handle plus its arguments and returns plain
JSON-friendly data. Only the create_* and update_* handlers write.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from database import RecordStore
from schemas import Claim, Client, Order, Product, User

Record = Dict[str, Any]


def _store(db: Database, collection: str) -> RecordStore:
    return RecordStore(db, collection)


def _attach(records: List[Record], resolve) -> List[Record]:
    # Every foreign key lookup runs concurrently; the first failure fails the read.
    if not records:
        return []
    with ThreadPoolExecutor(max_workers=len(records)) as pool:
        return list(pool.map(resolve, records))


# -----------------------------
# Users
# -----------------------------

def list_users(db: Database) -> List[Record]:
    return _store(db, "users").list()


def get_user_by_email(db: Database, email: str) -> Optional[Record]:
    return _store(db, "users").find_unique(email=email)


def get_user_by_full_name(db: Database, name: str, surname: str) -> Optional[Record]:
    """Single user with this exact name and surname, or None when there are zero or several."""
    return _store(db, "users").find_unique(name=name, surname=surname)


def create_user(db: Database, user: User) -> str:
    return _store(db, "users").insert(user)


# -----------------------------
# Clients
# -----------------------------

def list_clients(db: Database) -> List[Record]:
    return _store(db, "clients").list()


def get_client_by_email(db: Database, email: str) -> Optional[Record]:
    return _store(db, "clients").find_unique(email=email)


def create_client(db: Database, client: Client) -> str:
    return _store(db, "clients").insert(client)


# -----------------------------
# Products
# -----------------------------

def list_products(db: Database) -> List[Record]:
    return _store(db, "products").list()


def get_product(db: Database, product_id: str) -> Optional[Record]:
    return _store(db, "products").get(product_id)


def get_product_by_sku(db: Database, sku: str) -> Optional[Record]:
    return _store(db, "products").find_unique(sku=sku)


def create_product(db: Database, product: Product) -> str:
    return _store(db, "products").insert(product)


def update_product(db: Database, product_id: str, product: Product) -> None:
    """Overwrite every editable field of the product. No merge, no existence check."""
    _store(db, "products").replace(product_id, product)


# -----------------------------
# Orders
# -----------------------------

def list_orders(db: Database) -> List[Record]:
    return _store(db, "orders").list()


def list_orders_with_client(db: Database) -> List[Record]:
    clients = _store(db, "clients")

    def resolve(order: Record) -> Record:
        return {**order, "client": clients.get(order.get("client_id"))}

    return _attach(list_orders(db), resolve)


def create_order(db: Database, order: Order) -> str:
    return _store(db, "orders").insert(order)


# -----------------------------
# Claims
# -----------------------------

def list_claims(db: Database) -> List[Record]:
    return _store(db, "claims").list()


def list_claims_with_client_and_order(db: Database) -> List[Record]:
    clients = _store(db, "clients")
    orders = _store(db, "orders")

    def resolve(claim: Record) -> Record:
        return {
            **claim,
            "client": clients.get(claim.get("client_id")),
            "order": orders.get(claim.get("order_id")),
        }

    return _attach(list_claims(db), resolve)


def create_claim(db: Database, claim: Claim) -> str:
    return _store(db, "claims").insert(claim)
