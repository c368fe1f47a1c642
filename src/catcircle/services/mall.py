"""Mall — purchases, the simulated card checkout, coin top-ups and reviews."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from catcircle.errors import PurchaseError, ValidationFailed
from catcircle.schemas.base import new_id, now_ms
from catcircle.schemas.config import PaymentSettings
from catcircle.schemas.mall import PaymentMethod, Product, ProductReview, PurchaseRecord
from catcircle.schemas.profiles import OwnerProfile
from catcircle.shared.api_client import ApiClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopUpPackage:
    coins: int
    usd_price: float


TOP_UP_PACKAGES = (
    TopUpPackage(500, 4.99),
    TopUpPackage(1200, 9.99),
    TopUpPackage(3000, 24.99),
    TopUpPackage(7000, 49.99),
)


class PaymentStep(str, Enum):
    DETAILS = "details"
    PROCESSING = "processing"
    SUCCESS = "success"


StepCallback = Callable[[PaymentStep], None]


class PaymentSession:
    """Simulated card checkout: details -> processing -> success.

    No gateway is contacted; the two delays stand in for one.
    """

    def __init__(
        self,
        amount: float,
        item_name: str,
        *,
        settings: PaymentSettings | None = None,
        on_step: StepCallback | None = None,
    ) -> None:
        self.amount = amount
        self.item_name = item_name
        self.settings = settings or PaymentSettings()
        self.on_step = on_step
        self.step = PaymentStep.DETAILS

    def _advance(self, step: PaymentStep) -> None:
        self.step = step
        logger.debug("Payment for %s: %s", self.item_name, step.value)
        if self.on_step:
            self.on_step(step)

    async def pay(self) -> None:
        if self.step is not PaymentStep.DETAILS:
            raise PurchaseError(f"Payment already {self.step.value}")
        self._advance(PaymentStep.PROCESSING)
        await asyncio.sleep(self.settings.processing_seconds)
        self._advance(PaymentStep.SUCCESS)
        await asyncio.sleep(self.settings.success_seconds)


class MallService:
    def __init__(
        self,
        api: ApiClient,
        *,
        payment: PaymentSettings | None = None,
        on_step: StepCallback | None = None,
    ) -> None:
        self.api = api
        self.db = api.db
        self.payment = payment or PaymentSettings()
        self.on_step = on_step

    def products(self) -> list[Product]:
        return self.db.get_products()

    def get_product(self, product_id: str) -> Product:
        product = next((p for p in self.products() if p.id == product_id), None)
        if product is None:
            raise ValidationFailed(f"No product with id {product_id!r}")
        return product

    def _checkout(self, amount: float, item_name: str) -> PaymentSession:
        return PaymentSession(amount, item_name, settings=self.payment, on_step=self.on_step)

    async def purchase(
        self,
        buyer: OwnerProfile,
        product_id: str,
        method: PaymentMethod,
    ) -> tuple[PurchaseRecord, OwnerProfile]:
        """Buy a product. Coins are debited; USD goes through ``PaymentSession``.

        A coin purchase the balance cannot cover raises ``PurchaseError`` and
        changes nothing.
        """
        product = self.get_product(product_id)
        price = product.price_for(method)

        if method == "Coins":
            if buyer.coin_balance < price:
                raise PurchaseError("Not enough coins!")
            buyer = buyer.model_copy(update={"coin_balance": buyer.coin_balance - int(price)})
            await self.api.update_user(buyer)
        else:
            await self._checkout(price, product.name).pay()

        record = PurchaseRecord(
            id=new_id(),
            product=product,
            payment_method=method,
            amount_paid=price,
            timestamp=now_ms(),
        )
        self.db.save_purchases(buyer.id, [record, *self.db.get_purchases(buyer.id)])
        logger.info("%s bought %s for %s %s", buyer.id, product.id, price, method)
        return record, buyer

    async def top_up(self, owner: OwnerProfile, coins: int) -> OwnerProfile:
        """Buy one of the ``TOP_UP_PACKAGES`` by card and credit the coins."""
        package = next((p for p in TOP_UP_PACKAGES if p.coins == coins), None)
        if package is None:
            options = ", ".join(str(p.coins) for p in TOP_UP_PACKAGES)
            raise ValidationFailed(f"Unknown top-up package {coins}. Choose one of: {options}")
        await self._checkout(package.usd_price, f"{coins} Cat Coins").pay()
        updated = owner.model_copy(update={"coin_balance": owner.coin_balance + package.coins})
        await self.api.update_user(updated)
        return updated

    def add_review(self, author: OwnerProfile, product_id: str, rating: int, comment: str) -> Product:
        """Newest review first. Empty comments are rejected."""
        if not comment.strip():
            raise ValidationFailed("A review needs a comment.")
        if not 1 <= rating <= 5:
            raise ValidationFailed("Rating must be between 1 and 5.")
        products = self.products()
        for i, product in enumerate(products):
            if product.id == product_id:
                review = ProductReview(
                    id=new_id(),
                    owner_id=author.id,
                    rating=rating,
                    comment=comment.strip(),
                    timestamp=now_ms(),
                )
                products[i] = product.model_copy(update={"reviews": [review, *product.reviews]})
                self.db.save_products(products)
                return products[i]
        raise ValidationFailed(f"No product with id {product_id!r}")


def average_rating(product: Product) -> float:
    if not product.reviews:
        return 0.0
    return round(sum(r.rating for r in product.reviews) / len(product.reviews), 1)
