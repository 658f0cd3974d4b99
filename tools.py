from __future__ import annotations

import logging
from typing import List

from bson import ObjectId
from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pymongo.database import Database

import handlers
from schemas import Product

logger = logging.getLogger(__name__)


# ==========================
# Input shapes
# ==========================

class ToolInput(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class NoInput(ToolInput):
    pass


class FullNameInput(ToolInput):
    name: str = Field(description="First name of the user")
    surname: str = Field(description="Last name of the user")


class EmailInput(ToolInput):
    email: str = Field(description="Email address to look up")


class SkuInput(ToolInput):
    sku: str = Field(description="Product SKU")


class ProductInput(ToolInput):
    name: str = Field(description="Product name")
    description: str = Field(description="Product description")
    price: float = Field(description="Unit price")
    stock: int = Field(description="Units in stock")
    sku: str = Field(description="Stock keeping unit")
    created_at: int = Field(description="Creation time in epoch milliseconds")
    active: bool = Field(description="Whether the product is sold")


class UpdateProductInput(ProductInput):
    product_id: str = Field(description="Id of the product to edit")

    @field_validator("product_id")
    @classmethod
    def _valid_object_id(cls, value: str) -> str:
        if not ObjectId.is_valid(value):
            raise ValueError(f"'{value}' is not a valid product id")
        return value


# ==========================
# Tool registry / builder
# ==========================

def build_tools(db: Database) -> List[BaseTool]:
    """One adapter per handler; each forwards its validated arguments unchanged."""

    @tool("list_users", args_schema=NoInput)
    def list_users() -> list:
        """Obtiene la lista completa de usuarios."""
        logger.info("[tool] list_users")
        return handlers.list_users(db)

    @tool("get_user_by_full_name", args_schema=FullNameInput)
    def get_user_by_full_name(name: str, surname: str):
        """Obtiene un usuario específico por nombre y apellido."""
        logger.info("[tool] get_user_by_full_name")
        return handlers.get_user_by_full_name(db, name, surname)

    @tool("get_user_by_email", args_schema=EmailInput)
    def get_user_by_email(email: str):
        """Obtiene un usuario específico por su email."""
        logger.info("[tool] get_user_by_email")
        return handlers.get_user_by_email(db, email)

    @tool("list_clients", args_schema=NoInput)
    def list_clients() -> list:
        """Obtiene la lista completa de clientes."""
        logger.info("[tool] list_clients")
        return handlers.list_clients(db)

    @tool("list_sales", args_schema=NoInput)
    def list_sales() -> list:
        """Obtiene la lista completa de todas las ventas que existen en el momento con su cliente y productos."""
        logger.info("[tool] list_sales")
        return handlers.list_orders_with_client(db)

    @tool("list_products", args_schema=NoInput)
    def list_products() -> list:
        """Obtiene la lista de los productos."""
        logger.info("[tool] list_products")
        return handlers.list_products(db)

    @tool("get_product_by_sku", args_schema=SkuInput)
    def get_product_by_sku(sku: str):
        """Obtiene un producto por su SKU."""
        logger.info("[tool] get_product_by_sku")
        return handlers.get_product_by_sku(db, sku)

    @tool("list_claims", args_schema=NoInput)
    def list_claims() -> list:
        """Obtiene la lista de los reclamos con su cliente y su venta."""
        logger.info("[tool] list_claims")
        return handlers.list_claims_with_client_and_order(db)

    @tool("create_product", args_schema=ProductInput)
    def create_product(name: str, description: str, price: float, stock: int, sku: str, created_at: int, active: bool) -> str:
        """Crea un nuevo producto."""
        logger.info("[tool] create_product")
        product = Product(name=name, description=description, price=price, stock=stock, sku=sku, created_at=created_at, active=active)
        return handlers.create_product(db, product)

    @tool("update_product", args_schema=UpdateProductInput)
    def update_product(product_id: str, name: str, description: str, price: float, stock: int, sku: str, created_at: int, active: bool) -> None:
        """Edita un producto existente reemplazando todos sus campos."""
        logger.info("[tool] update_product")
        product = Product(name=name, description=description, price=price, stock=stock, sku=sku, created_at=created_at, active=active)
        return handlers.update_product(db, product_id, product)

    return [
        list_users, get_user_by_full_name, get_user_by_email, list_clients, list_sales,
        list_products, get_product_by_sku, list_claims, create_product, update_product,
    ]
