"""Shop service: CRUD and queries over the ``shops`` collection."""

from typing import Any, Dict

from mallconsole.schemas.common import ServiceResult
from mallconsole.schemas.shop import Shop, ShopForm
from mallconsole.services.resource_service import ResourceService, trim


class ShopService(ResourceService[Shop, ShopForm]):
    """Service for mall shops.

    Shops carry free-text ``floor`` and ``category`` labels; the console
    derives its floor and category lists from them.
    """

    collection = "shops"
    resource_name = "Shop"
    document_model = Shop
    form_model = ShopForm
    required_fields = ("name", "floor", "category")
    required_message = "Name, floor, and category are required"
    search_fields = ("name", "description", "category", "floor")

    def _build_fields(self, form: ShopForm, *, for_update: bool) -> Dict[str, Any]:
        fields = {
            "name": form.name,
            "description": form.description,
            "floor": form.floor,
            "category": form.category,
            "location": form.location,
            "contact": form.contact,
            "email": form.email,
            "openingHours": form.opening_hours,
        }
        return {key: trim(value) for key, value in fields.items()}

    async def by_floor(self, floor: str) -> ServiceResult:
        """Shops on one floor (equality filter at the store)."""
        return await self._query("shops_by_floor", (("floor", floor),))

    async def by_category(self, category: str) -> ServiceResult:
        """Shops in one category (equality filter at the store)."""
        return await self._query("shops_by_category", (("category", category),))
