"""
Database Schemas

MongoDB collection schemas for the corporate assistant, as Pydantic models.
These schemas are used for data validation before anything is written.

Each model maps to one plural collection name:
- User -> "users" collection
- Client -> "clients" collection
- Product -> "products" collection
- Order -> "orders" collection
- Claim -> "claims" collection

Timestamps are epoch milliseconds supplied by the caller.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional, Tuple

ClientStatus = Literal["active", "inactive"]
OrderStatus = Literal["pending", "paid", "shipped", "delivered", "cancelled"]
ClaimType = Literal["refund", "damaged", "wrong_item", "late_delivery", "other"]
ClaimStatus = Literal["open", "in_review", "resolved", "rejected"]

# -----------------------------
# Core Models
# -----------------------------

class User(BaseModel):
    """
    Users collection schema
    Collection: "users"
    """
    name: str = Field(..., description="First name")
    surname: str = Field(..., description="Last name")
    email: str = Field(..., description="Email address")
    role: str = Field(..., description="Role inside the company")
    active: bool = Field(..., description="Whether the user is active")
    created_at: int = Field(..., description="Creation time (epoch ms)")
    updated_at: Optional[int] = Field(None, description="Last update time (epoch ms)")

class Client(BaseModel):
    """
    Clients collection schema
    Collection: "clients"
    """
    full_name: str
    email: str
    phone: str
    address: str
    created_at: int
    status: ClientStatus

class Product(BaseModel):
    """
    Products collection schema
    Collection: "products"
    """
    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Product description")
    price: float = Field(..., description="Unit price")
    stock: int = Field(..., description="Units in stock")
    sku: str = Field(..., description="Stock keeping unit")
    created_at: int = Field(..., description="Creation time (epoch ms)")
    active: bool = Field(..., description="Whether the product is sold")

class OrderItem(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    price_at_purchase: float
    subtotal: float

class Order(BaseModel):
    """
    Orders collection schema
    Collection: "orders"
    """
    client_id: str
    items: List[OrderItem]
    total_amount: float
    status: OrderStatus = Field(..., description="pending, paid, shipped, delivered, cancelled")
    created_at: int

class Claim(BaseModel):
    """
    Claims collection schema
    Collection: "claims"
    """
    client_id: str
    order_id: str
    type: ClaimType
    description: str
    status: ClaimStatus = Field(..., description="open, in_review, resolved, rejected")
    created_at: int

# -----------------------------
# Secondary indexes
# -----------------------------

INDEXES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "users": {
        "by_email": ("email",),
        "by_fullname": ("name", "surname"),
    },
    "clients": {
        "by_email": ("email",),
        "by_status": ("status",),
    },
    "products": {
        "by_sku": ("sku",),
        "by_active": ("active",),
    },
    "orders": {
        "by_client": ("client_id",),
        "by_status": ("status",),
    },
    "claims": {
        "by_client": ("client_id",),
        "by_order": ("order_id",),
        "by_status": ("status",),
    },
}
