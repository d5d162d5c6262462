"""Offer Pydantic schemas."""

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional, Union

from pydantic import Field, field_validator

from mallconsole.schemas.base import DocumentModel, FormModel, parse_timestamp

DiscountType = Literal["percentage", "fixed"]


class Offer(DocumentModel):
    """Offer document as stored in the ``offers`` collection."""

    title: str = ""
    description: str = ""
    shop_id: str = ""
    shop_name: str = ""
    discount: float = 0.0
    discount_type: DiscountType = "percentage"
    product_ids: List[str] = Field(default_factory=list)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True
    image_url: str = ""
    terms: str = ""

    @field_validator("valid_from", "valid_until", mode="before")
    @classmethod
    def as_utc(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    def is_currently_active(self, now: Optional[datetime] = None) -> bool:
        """Active flag set and validUntil absent or strictly in the future."""
        if not self.is_active:
            return False
        if self.valid_until is None:
            return True
        now = now or datetime.now(timezone.utc)
        return self.valid_until > now

    @property
    def discount_label(self) -> str:
        """'10% OFF' for percentage offers, '$5 OFF' for fixed ones."""
        amount = f"{self.discount:g}"
        if self.discount_type == "percentage":
            return f"{amount}% OFF"
        return f"${amount} OFF"


class OfferForm(FormModel):
    """Offer create/edit form data. ``discount`` is coerced by the offer service."""

    title: Optional[str] = None
    description: Optional[str] = None
    shop_id: Optional[str] = None
    shop_name: Optional[str] = None
    discount: Optional[Union[float, str]] = None
    discount_type: Optional[DiscountType] = None
    product_ids: Optional[List[str]] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None
    image_url: Optional[str] = None
    terms: Optional[str] = None

    @field_validator("valid_from", "valid_until", mode="before")
    @classmethod
    def as_utc(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("discount_type", mode="before")
    @classmethod
    def blank_discount_type(cls, value: Any) -> Any:
        return value or None

    @classmethod
    def from_offer(cls, offer: Offer) -> "OfferForm":
        return cls(
            title=offer.title,
            description=offer.description,
            shop_id=offer.shop_id,
            shop_name=offer.shop_name,
            discount=offer.discount,
            discount_type=offer.discount_type,
            product_ids=list(offer.product_ids),
            valid_from=offer.valid_from,
            valid_until=offer.valid_until,
            is_active=offer.is_active,
            image_url=offer.image_url,
            terms=offer.terms,
        )
