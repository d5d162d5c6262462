"""Application context: the console's in-memory snapshot.

One ``AppContext`` belongs to one console session. It holds the loaded
collections, the derived category and floor lists, the signed-in identity
and role, the current page and the product comparison selection.

Loads are tagged with a generation number. ``advance()`` (navigation) and
``reset()`` (sign-out) bump the generation; any load that started under an
older generation is discarded instead of written into the snapshot.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import structlog

from mallconsole.schemas.auth import Identity
from mallconsole.schemas.common import ErrorDetail, ServiceResult
from mallconsole.schemas.offer import Offer
from mallconsole.schemas.product import Product
from mallconsole.schemas.shop import Shop
from mallconsole.services.offer_service import OfferService
from mallconsole.services.product_service import ProductService
from mallconsole.services.resource_service import ResourceService
from mallconsole.services.shop_service import ShopService

logger = structlog.get_logger(__name__)

COLLECTIONS = ("shops", "products", "offers")


@dataclass
class ResourceServices:
    """The three resource services, addressable by collection name."""

    shops: ShopService
    products: ProductService
    offers: OfferService

    def for_collection(self, name: str) -> ResourceService:
        if name not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {name}")
        return getattr(self, name)


@dataclass
class LoadOutcome:
    """Result of a (re)load.

    Attributes:
        applied: Collections whose fresh data was written into the snapshot
        errors: Failed collections with their error detail (previous data kept)
        stale: True if the load was superseded and nothing was written
    """

    applied: List[str] = field(default_factory=list)
    errors: Dict[str, ErrorDetail] = field(default_factory=dict)
    stale: bool = False

    @property
    def success(self) -> bool:
        return not self.stale and not self.errors

    @property
    def first_error(self) -> Optional[str]:
        for detail in self.errors.values():
            return detail.message
        return None


def _unique(values: Iterable[Optional[str]]) -> List[str]:
    seen: Dict[str, None] = {}
    for value in values:
        if value and value not in seen:
            seen[value] = None
    return list(seen)


def derive_categories(shops: Iterable[Shop], products: Iterable[Product]) -> List[str]:
    """Shop categories, then product categories; de-duplicated, first-seen order."""
    return _unique([s.category for s in shops] + [p.category for p in products])


def derive_floors(shops: Iterable[Shop]) -> List[str]:
    """Shop floors, de-duplicated, first-seen order."""
    return _unique(s.floor for s in shops)


class AppContext:
    """Snapshot of everything the views render from.

    The context does not enforce authorization: ``role`` is advisory state
    the console uses to gate its own actions.
    """

    def __init__(self, services: ResourceServices):
        self.services = services
        self.generation = 0
        self._clear()

    def _clear(self) -> None:
        self.current_page = "dashboard"
        self.identity: Optional[Identity] = None
        self.role: Optional[str] = None
        self.shops: List[Shop] = []
        self.products: List[Product] = []
        self.offers: List[Offer] = []
        self.categories: List[str] = []
        self.floors: List[str] = []
        # insertion-ordered set of product ids
        self.selected_products: Dict[str, None] = {}
        self._fresh: set = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def advance(self) -> int:
        """Start a new generation; loads already in flight become stale.

        Nothing is fresh in a new generation until it has been loaded again.
        """
        self.generation += 1
        self._fresh.clear()
        return self.generation

    def reset(self) -> None:
        """Drop everything (sign-out). In-flight loads become stale."""
        self.advance()
        self._clear()
        logger.info("context_reset", generation=self.generation)

    def set_identity(self, identity: Optional[Identity]) -> None:
        self.identity = identity

    def set_role(self, role: Optional[str]) -> None:
        self.role = role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def is_fresh(self, name: str) -> bool:
        return name in self._fresh

    def invalidate(self, *names: str) -> None:
        for name in names or COLLECTIONS:
            self._fresh.discard(name)

    def recompute_derived(self) -> None:
        self.categories = derive_categories(self.shops, self.products)
        self.floors = derive_floors(self.shops)

    def _apply(self, name: str, result: ServiceResult, outcome: LoadOutcome) -> None:
        if result.success:
            setattr(self, name, list(result.data))
            self._fresh.add(name)
            outcome.applied.append(name)
        else:
            outcome.errors[name] = result.error
            logger.warning("collection_load_failed", collection=name, error=result.error.message)

    async def reload_all(self) -> LoadOutcome:
        """Fetch shops, products and offers concurrently.

        Each collection that loads replaces its slot; a collection that fails
        keeps its previous contents. Derived data is recomputed afterwards.
        """
        return await self._load(COLLECTIONS)

    async def reload(self, *names: str) -> LoadOutcome:
        """Reload only the named collections, with the same rules as ``reload_all``."""
        return await self._load(names or COLLECTIONS)

    async def _load(self, names: Iterable[str]) -> LoadOutcome:
        names = tuple(names)
        generation = self.generation
        results = await asyncio.gather(
            *(self.services.for_collection(name).list_all() for name in names)
        )

        outcome = LoadOutcome()
        if generation != self.generation:
            logger.info("stale_load_discarded", collections=list(names), generation=generation)
            outcome.stale = True
            return outcome

        for name, result in zip(names, results):
            self._apply(name, result, outcome)
        self.recompute_derived()

        logger.info(
            "collections_loaded",
            applied=outcome.applied,
            failed=list(outcome.errors),
            generation=generation,
        )
        return outcome

    async def search(self, name: str, query: Optional[str]) -> LoadOutcome:
        """Replace a collection's working set with the results of a search.

        A blank query reloads the full collection. Search results are not a
        full load, so the collection is no longer fresh afterwards.
        """
        if not (query or "").strip():
            return await self.reload(name)

        generation = self.generation
        result = await self.services.for_collection(name).search(query)

        outcome = LoadOutcome()
        if generation != self.generation:
            outcome.stale = True
            return outcome
        self._apply(name, result, outcome)
        self._fresh.discard(name)
        return outcome

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find(self, name: str, doc_id: str) -> Optional[Any]:
        for doc in getattr(self, name):
            if doc.id == doc_id:
                return doc
        return None

    def shop_name_for(self, entity: Any) -> str:
        """Current name of the entity's shop, or its stored snapshot if the shop is gone."""
        shop = self.find("shops", entity.shop_id) if entity.shop_id else None
        if shop is not None:
            return shop.name
        return entity.shop_name

    # ------------------------------------------------------------------
    # Product selection
    # ------------------------------------------------------------------

    def toggle_selection(self, product_id: str) -> bool:
        """Flip one product's selection; returns whether it is now selected."""
        if product_id in self.selected_products:
            del self.selected_products[product_id]
            return False
        self.selected_products[product_id] = None
        return True

    def select_all(self) -> None:
        for product in self.products:
            self.selected_products[product.id] = None

    def clear_selection(self) -> None:
        self.selected_products.clear()

    def selected_ids(self) -> List[str]:
        return list(self.selected_products)

    def is_selected(self, product_id: str) -> bool:
        return product_id in self.selected_products

    @property
    def all_selected(self) -> bool:
        return bool(self.products) and all(p.id in self.selected_products for p in self.products)
