# schemas.py
# Pydantic models validating what reaches the order and product services.
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from core import HOME_STATE, STATES


class OrderLine(BaseModel):
    product_id: Optional[int] = Field(None, description="Catalog product, if any")
    product_name: str = Field(..., min_length=1)
    price: int = Field(..., ge=0, description="Unit price in naira")
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    color: Optional[str] = None


class OrderPayload(BaseModel):
    order_number: str = Field(..., min_length=1, max_length=20)
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    customer_phone: str = Field(..., min_length=1)
    total_amount: Decimal = Field(..., ge=0)
    delivery_option: Literal["pickup", "delivery"]
    selected_state: str
    delivery_address: Optional[str] = None
    city: Optional[str] = None
    note: Optional[str] = None
    receipt_url: Optional[str] = None
    items: List[OrderLine] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_delivery(self):
        if self.selected_state not in STATES:
            raise ValueError(f"Unknown state: {self.selected_state}")
        if self.delivery_option == "pickup":
            if self.selected_state != HOME_STATE:
                raise ValueError(f"Pickup is only available in {HOME_STATE}")
            self.delivery_address = None
            self.city = None
        else:
            if not (self.delivery_address or "").strip():
                raise ValueError("Delivery address is required for delivery orders")
            if not (self.city or "").strip():
                raise ValueError("City is required for delivery orders")
        return self


class ProductPayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = ""
    price: int = Field(..., ge=0)
    category: Literal["men", "women", "unisex"] = "men"
    main_image: str = ""
    images: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    stock: int = Field(0, ge=0)

    @model_validator(mode="after")
    def drop_blanks(self):
        self.colors = [c.strip() for c in self.colors if c.strip()]
        self.sizes = [s.strip() for s in self.sizes if s.strip()]
        self.images = [i.strip() for i in self.images if i.strip()]
        return self


class StatusUpdate(BaseModel):
    status: Literal["pending", "confirmed", "shipped", "delivered", "cancelled"]


def error_text(exc):
    """Flatten a pydantic ValidationError into one readable line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        msg = err.get("msg", "invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)
