"""Cart models with Decimal-based pricing."""
import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

from vettrack.services.money import to_decimal, multiply


class CartState(str, Enum):
    """Cart macro-state."""
    HYDRATING = "hydrating"  # Persisted value not loaded yet
    READY = "ready"


class ProductSnapshot(BaseModel):
    """
    Catalog product as handed to the cart by the shop pages.

    Accepts the catalog's camelCase JSON (stockQty) as well as snake_case.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str
    price: str
    stock_qty: Optional[int] = Field(default=None, alias="stockQty")
    images: Optional[List[str]] = None
    brand: Optional[str] = None

    @property
    def image_url(self) -> Optional[str]:
        return self.images[0] if self.images else None


def new_line_id() -> str:
    """Opaque id for a freshly inserted line."""
    return uuid.uuid4().hex


@dataclass
class CartLine:
    """
    One row per distinct product in the cart.

    name, unit_price, image_url and brand are a snapshot taken when the
    product was added. They are never refreshed from the catalog.
    """
    product_id: str
    name: str
    unit_price: str
    quantity: int
    image_url: Optional[str] = None
    brand: Optional[str] = None
    stock_limit: Optional[int] = None  # None = unbounded
    line_id: str = field(default_factory=new_line_id)

    @classmethod
    def from_product(cls, product: ProductSnapshot, quantity: int) -> "CartLine":
        """Create a new line from a catalog product."""
        return cls(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            quantity=quantity,
            image_url=product.image_url,
            brand=product.brand,
            stock_limit=product.stock_qty,
        )

    @property
    def price(self) -> Decimal:
        """Parsed unit price."""
        return to_decimal(self.unit_price)

    @property
    def total_price(self) -> Decimal:
        """Price for all units of this line."""
        return multiply(self.price, self.quantity)

    def exceeds_stock(self, quantity: int) -> bool:
        """True if `quantity` is above this line's stock limit."""
        return self.stock_limit is not None and quantity > self.stock_limit

    def copy(self) -> "CartLine":
        return replace(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "line_id": self.line_id,
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "image_url": self.image_url,
            "brand": self.brand,
            "stock_limit": self.stock_limit,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        """Create from dictionary."""
        stock_limit = data.get("stock_limit")
        return cls(
            line_id=str(data["line_id"]),
            product_id=str(data["product_id"]),
            name=str(data["name"]),
            unit_price=str(data["unit_price"]),
            quantity=int(data["quantity"]),
            image_url=data.get("image_url"),
            brand=data.get("brand"),
            stock_limit=int(stock_limit) if stock_limit is not None else None,
        )
