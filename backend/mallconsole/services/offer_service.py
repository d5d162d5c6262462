"""Offer service: CRUD, queries and the "currently active" view."""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from mallconsole.core.exceptions import RemoteError, ValidationError
from mallconsole.schemas.common import ServiceResult
from mallconsole.schemas.offer import Offer, OfferForm
from mallconsole.services.resource_service import ResourceService, coerce_number, is_blank, trim
from mallconsole.store.document_store import SERVER_TIMESTAMP, DocumentStoreError


class OfferService(ResourceService[Offer, OfferForm]):
    """Service for shop offers and discounts."""

    collection = "offers"
    resource_name = "Offer"
    document_model = Offer
    form_model = OfferForm
    required_fields = ("title", "shopId", "discount")
    required_message = "Title, shop ID, and discount are required"
    search_fields = ("title", "description", "shop_name")
    keep_empty_on_update = frozenset({"productIds"})

    def _build_fields(self, form: OfferForm, *, for_update: bool) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            "title": trim(form.title),
            "description": trim(form.description),
            "shopId": trim(form.shop_id),
            "shopName": trim(form.shop_name),
            "imageUrl": trim(form.image_url),
            "terms": trim(form.terms),
        }

        if not for_update:
            fields["discount"] = coerce_number(form.discount)
            fields["discountType"] = form.discount_type or "percentage"
            fields["productIds"] = list(form.product_ids or [])
            fields["validFrom"] = form.valid_from or SERVER_TIMESTAMP
            fields["validUntil"] = form.valid_until
            fields["isActive"] = True if form.is_active is None else form.is_active
            return fields

        if not is_blank(form.discount):
            fields["discount"] = coerce_number(form.discount)
        if form.discount_type is not None:
            fields["discountType"] = form.discount_type
        if form.product_ids is not None:
            fields["productIds"] = list(form.product_ids)
        if form.valid_from is not None:
            fields["validFrom"] = form.valid_from
        if form.valid_until is not None:
            fields["validUntil"] = form.valid_until
        if form.is_active is not None:
            fields["isActive"] = form.is_active
        return fields

    def _validate_record(self, record: Mapping[str, Any]) -> None:
        super()._validate_record(record)
        if coerce_number(record.get("discount")) < 0:
            raise ValidationError("Discount cannot be negative")

    async def by_shop(self, shop_id: str) -> ServiceResult:
        """Active-flagged offers of one shop (equality filters at the store)."""
        return await self._query("offers_by_shop", (("shopId", shop_id), ("isActive", True)))

    async def list_active(self, now: Optional[datetime] = None) -> ServiceResult:
        """Offers flagged active whose validUntil is absent or still ahead.

        The active flag is filtered by the store, the date locally.
        """
        now = now or datetime.now(timezone.utc)
        try:
            raw = await self._ref().where("isActive", True).get_all()
            offers = [o for o in self._to_documents(raw) if o.is_currently_active(now)]
        except (DocumentStoreError, RemoteError) as e:
            return self._fail("active_offers_failed", e)

        self.logger.info("active_offers_retrieved", count=len(offers))
        return ServiceResult.ok(offers)
