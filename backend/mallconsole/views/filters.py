"""Structured list filters.

Filters on one list combine with AND. Search is separate: it replaces the
collection's working set in the context and clears that collection's
structured filters (see ``ViewFilters.clear``).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from mallconsole.schemas.offer import Offer
from mallconsole.schemas.product import Product
from mallconsole.schemas.shop import Shop


@dataclass
class ShopFilters:
    floor: str = ""
    category: str = ""

    def apply(self, shops: List[Shop]) -> List[Shop]:
        if self.floor:
            shops = [s for s in shops if s.floor == self.floor]
        if self.category:
            shops = [s for s in shops if s.category == self.category]
        return shops


@dataclass
class ProductFilters:
    """Category equality AND inclusive price range. Missing price counts as 0."""

    category: str = ""
    min_price: Optional[float] = None
    max_price: Optional[float] = None

    def apply(self, products: List[Product]) -> List[Product]:
        low = self.min_price or 0
        high = float("inf") if self.max_price is None else self.max_price
        if self.category:
            products = [p for p in products if p.category == self.category]
        return [p for p in products if low <= (p.price or 0) <= high]


@dataclass
class OfferFilters:
    """Show only currently active offers when ``active_only`` is set."""

    active_only: bool = True

    def apply(self, offers: List[Offer], now: Optional[datetime] = None) -> List[Offer]:
        if not self.active_only:
            return offers
        return [o for o in offers if o.is_currently_active(now)]


@dataclass
class ViewFilters:
    """Filter parameters for every list page."""

    shops: ShopFilters = field(default_factory=ShopFilters)
    products: ProductFilters = field(default_factory=ProductFilters)
    offers: OfferFilters = field(default_factory=OfferFilters)

    def clear(self, name: str) -> None:
        """Reset one collection's filters to their defaults."""
        setattr(self, name, type(getattr(self, name))())
