"""
Models, output schemas and resource declarations used across the test suite.

Customers hard-delete and are referenced by orders and invoices.
Categories soft-delete and are referenced by products.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from scaffold_api.models import Base, SoftDeleteMixin, TimestampMixin
from scaffold_api.services.crud import (
    ControllerConfig,
    DependencyDescriptor,
    ExistsRule,
    ListOptions,
    ResourceDefinition,
    ReturnOn,
    RuleSets,
)


# =============================================================================
# Models
# =============================================================================


class Customer(Base, TimestampMixin):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255))
    avatar_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)


class Order(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(Integer, index=True)
    reference: Mapped[str] = mapped_column(String(50))


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(Integer, index=True)
    total_cents: Mapped[int] = mapped_column(Integer, default=0)


class Category(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50))


class Product(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    category_id: Mapped[int] = mapped_column(Integer, index=True)
    price_cents: Mapped[int] = mapped_column(Integer)
    featured: Mapped[bool] = mapped_column(default=False)


# =============================================================================
# Output schemas
# =============================================================================


class CustomerOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    avatar_path: Optional[str] = None


class CategoryOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ProductOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category_id: int
    price_cents: int
    featured: bool = False


# =============================================================================
# Resource declarations
# =============================================================================


CUSTOMERS = ResourceDefinition(
    name="customers",
    model=Customer,
    output_schema=CustomerOutput,
    data=("name", "email"),
    uploads={"avatar": "avatar_path"},
    filter_by=("email",),
    delete_dependencies=(
        DependencyDescriptor("orders", "customer_id", "has orders"),
        DependencyDescriptor("invoices", "customer_id", "has invoices"),
    ),
)

CATEGORIES = ResourceDefinition(
    name="categories",
    model=Category,
    output_schema=CategoryOutput,
    data=("name",),
    filter_by=("name",),
    delete_dependencies=(
        DependencyDescriptor("products", "category_id", "has products"),
    ),
)

PRODUCTS = ResourceDefinition(
    name="products",
    model=Product,
    output_schema=ProductOutput,
    data=("name", "category_id", "price_cents", "featured"),
    filter_by=("category_id", "featured"),
)


CUSTOMER_CONFIG = ControllerConfig(
    view="admin.customers",
    return_on=ReturnOn(store="single-record", update="single-record"),
    rules=RuleSets(
        all={"name": "required|string|max:100", "avatar": "image|max:2048"},
        store={"email": "required|email|unique"},
        update={"email": "required|email|unique"},
    ),
)

CATEGORY_CONFIG = ControllerConfig(
    view="admin.categories",
    return_on=ReturnOn(store="redirect", update="redirect"),
    rules=RuleSets(all={"name": "required|string|max:50"}),
)

PRODUCT_CONFIG = ControllerConfig(
    view="admin.products",
    list_options=ListOptions(paginate=True, items_per_page=2),
    return_on=ReturnOn(store="all-records", update="all-records"),
    rules=RuleSets(
        all={
            "name": "required|string",
            "price_cents": "required|integer|min:1",
            "category_id": ["required", "integer", ExistsRule("categories", "id")],
        },
    ),
)
