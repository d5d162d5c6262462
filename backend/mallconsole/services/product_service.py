"""Product service: CRUD, queries, comparison and price filtering.

Prices are coerced from form input: anything that does not parse as a
finite number is stored as 0.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from mallconsole.core.exceptions import ValidationError
from mallconsole.schemas.common import ServiceResult
from mallconsole.schemas.product import Product, ProductForm
from mallconsole.services.resource_service import ResourceService, coerce_number, is_blank, trim


class ProductService(ResourceService[Product, ProductForm]):
    """Service for products sold by mall shops.

    ``shopId`` is a plain reference: deleting a shop leaves its products
    pointing at a missing id.
    """

    collection = "products"
    resource_name = "Product"
    document_model = Product
    form_model = ProductForm
    required_fields = ("name", "shopId", "price")
    required_message = "Name, shop ID, and price are required"
    search_fields = ("name", "description", "brand", "category", "shop_name")

    def _build_fields(self, form: ProductForm, *, for_update: bool) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            "name": trim(form.name),
            "description": trim(form.description),
            "shopId": trim(form.shop_id),
            "shopName": trim(form.shop_name),
            "category": trim(form.category),
            "brand": trim(form.brand),
            "features": [f.strip() for f in (form.features or []) if f and f.strip()],
            "imageUrl": trim(form.image_url),
        }

        if not for_update or not is_blank(form.price):
            fields["price"] = coerce_number(form.price)
        if not for_update or form.in_stock is not None:
            fields["inStock"] = True if form.in_stock is None else form.in_stock
        return fields

    def _validate_record(self, record: Mapping[str, Any]) -> None:
        super()._validate_record(record)
        if coerce_number(record.get("price")) < 0:
            raise ValidationError("Price cannot be negative")

    async def by_shop(self, shop_id: str) -> ServiceResult:
        """Products of one shop (equality filter at the store)."""
        return await self._query("products_by_shop", (("shopId", shop_id),))

    async def by_category(self, category: str) -> ServiceResult:
        """Products in one category (equality filter at the store)."""
        return await self._query("products_by_category", (("category", category),))

    async def compare_by_ids(self, product_ids: Iterable[str]) -> ServiceResult:
        """Fetch products one at a time for side-by-side comparison.

        Ids that fail to resolve are silently left out; the only signal is
        a shorter list.
        """
        products = []
        for product_id in product_ids:
            result = await self.get_by_id(product_id)
            if result.success:
                products.append(result.data)

        self.logger.info("products_compared", count=len(products))
        return ServiceResult.ok(products)

    async def filter_by_price_range(
        self,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> ServiceResult:
        """Products whose price lies within [min_price, max_price].

        Args:
            min_price: Inclusive lower bound (default: 0)
            max_price: Inclusive upper bound (default: unbounded)
        """
        low = 0.0 if min_price is None else min_price
        high = float("inf") if max_price is None else max_price

        result = await self.list_all()
        if not result.success:
            return result

        filtered = [p for p in result.data if low <= (p.price or 0) <= high]
        self.logger.info("products_price_filtered", min_price=low, max_price=max_price, count=len(filtered))
        return ServiceResult.ok(filtered)
