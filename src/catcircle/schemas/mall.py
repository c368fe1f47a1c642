"""Mall models."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from catcircle.schemas.base import CamelModel

PaymentMethod = Literal["USD", "Coins"]


class ProductReview(CamelModel):
    id: str
    owner_id: str
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    timestamp: int


class Product(CamelModel):
    id: str
    name: str
    usd_price: float
    cat_coin_price: int
    category: Literal["Food", "Clothes", "Gear"]
    image_url: str = ""
    description: str = ""
    reviews: list[ProductReview] = []

    def price_for(self, method: PaymentMethod) -> float:
        return self.usd_price if method == "USD" else self.cat_coin_price


class PurchaseRecord(CamelModel):
    id: str
    product: Product
    payment_method: PaymentMethod
    amount_paid: float
    timestamp: int
