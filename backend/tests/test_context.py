"""Tests for the application context (snapshot, derived data, generations)."""

from unittest.mock import AsyncMock, MagicMock

from mallconsole.core.exceptions import RemoteError
from mallconsole.schemas.common import ServiceResult
from mallconsole.schemas.offer import Offer
from mallconsole.schemas.product import Product
from mallconsole.schemas.shop import Shop
from mallconsole.state.context import AppContext, ResourceServices, derive_categories, derive_floors


def _services(shops=(), products=(), offers=()):
    """Resource service doubles whose list_all returns the given documents."""
    services = ResourceServices(shops=MagicMock(), products=MagicMock(), offers=MagicMock())
    services.shops.list_all = AsyncMock(return_value=ServiceResult.ok(list(shops)))
    services.products.list_all = AsyncMock(return_value=ServiceResult.ok(list(products)))
    services.offers.list_all = AsyncMock(return_value=ServiceResult.ok(list(offers)))
    return services


SHOPS = [
    Shop(id="s1", name="Zara", floor="Ground", category="Fashion"),
    Shop(id="s2", name="Apple", floor="First", category="Electronics"),
]
PRODUCTS = [
    Product(id="p1", name="Jeans", shop_id="s1", shop_name="Zara", category="Denim", price=50),
    Product(id="p2", name="iPhone", shop_id="s2", shop_name="Apple", category="Electronics", price=900),
]
OFFERS = [Offer(id="o1", title="Sale", shop_id="s1", shop_name="Zara", discount=10)]


class TestDerivedData:
    def test_categories_deduplicated_first_seen(self):
        shops = [Shop(id="1", category="A"), Shop(id="2", category="B"), Shop(id="3", category="A")]

        assert derive_categories(shops, []) == ["A", "B"]

    def test_product_categories_follow_shop_categories(self):
        products = [Product(id="p", category="C"), Product(id="q", category="A")]

        assert derive_categories([Shop(id="1", category="A")], products) == ["A", "C"]

    def test_blank_values_skipped(self):
        shops = [Shop(id="1", floor=""), Shop(id="2", floor="Ground"), Shop(id="3", floor="Ground")]

        assert derive_floors(shops) == ["Ground"]


class TestReload:
    async def test_reload_all_populates_snapshot(self):
        ctx = AppContext(_services(SHOPS, PRODUCTS, OFFERS))

        outcome = await ctx.reload_all()

        assert outcome.success
        assert sorted(outcome.applied) == ["offers", "products", "shops"]
        assert [s.id for s in ctx.shops] == ["s1", "s2"]
        assert ctx.categories == ["Fashion", "Electronics", "Denim"]
        assert ctx.floors == ["Ground", "First"]
        assert ctx.is_fresh("products")

    async def test_failed_collection_keeps_previous_value(self):
        services = _services(SHOPS, PRODUCTS, OFFERS)
        ctx = AppContext(services)
        await ctx.reload_all()

        services.shops.list_all.return_value = ServiceResult.ok([SHOPS[0]])
        services.products.list_all.return_value = ServiceResult.fail(RemoteError("unavailable"))
        outcome = await ctx.reload_all()

        assert outcome.applied == ["shops", "offers"]
        assert outcome.errors["products"].message == "unavailable"
        assert outcome.first_error == "unavailable"
        assert [s.id for s in ctx.shops] == ["s1"]
        assert [p.id for p in ctx.products] == ["p1", "p2"]

    async def test_stale_generation_is_discarded(self):
        services = _services(SHOPS, PRODUCTS, OFFERS)
        ctx = AppContext(services)

        async def slow_list_all():
            ctx.advance()
            return ServiceResult.ok(SHOPS)

        services.shops.list_all = AsyncMock(side_effect=slow_list_all)
        outcome = await ctx.reload_all()

        assert outcome.stale
        assert ctx.shops == []
        assert ctx.products == []

    async def test_reset_discards_in_flight_load(self):
        services = _services(SHOPS, PRODUCTS, OFFERS)
        ctx = AppContext(services)

        async def sign_out_midway():
            ctx.reset()
            return ServiceResult.ok(PRODUCTS)

        services.products.list_all = AsyncMock(side_effect=sign_out_midway)
        outcome = await ctx.reload("products")

        assert outcome.stale
        assert ctx.products == []

    async def test_advance_clears_freshness(self):
        ctx = AppContext(_services(SHOPS))
        await ctx.reload("shops")

        ctx.advance()

        assert not ctx.is_fresh("shops")

    async def test_malformed_document_fails_only_its_collection(self, services, store):
        await store.collection("shops").add({"name": "Zara", "floor": "Ground", "category": "Fashion"})
        await store.collection("products").add({"name": "Broken", "shopId": "s1", "price": "abc"})
        ctx = AppContext(services)

        outcome = await ctx.reload_all()

        assert outcome.applied == ["shops", "offers"]
        assert list(outcome.errors) == ["products"]
        assert outcome.errors["products"].code == "remote_error"
        assert [s.name for s in ctx.shops] == ["Zara"]
        assert ctx.products == []
        assert not ctx.is_fresh("products")


class TestSearchWorkingSet:
    async def test_search_replaces_collection(self):
        services = _services(SHOPS)
        services.shops.search = AsyncMock(return_value=ServiceResult.ok([SHOPS[1]]))
        ctx = AppContext(services)
        await ctx.reload_all()

        outcome = await ctx.search("shops", "apple")

        assert outcome.applied == ["shops"]
        assert [s.id for s in ctx.shops] == ["s2"]
        assert not ctx.is_fresh("shops")

    async def test_blank_search_reloads(self):
        services = _services(SHOPS)
        services.shops.search = AsyncMock()
        ctx = AppContext(services)

        await ctx.search("shops", "  ")

        services.shops.search.assert_not_awaited()
        assert [s.id for s in ctx.shops] == ["s1", "s2"]
        assert ctx.is_fresh("shops")


class TestSelectionAndLookups:
    async def test_selection_survives_reload(self):
        services = _services(SHOPS, PRODUCTS)
        ctx = AppContext(services)
        await ctx.reload_all()
        ctx.toggle_selection("p1")
        ctx.toggle_selection("p2")

        services.products.list_all.return_value = ServiceResult.ok([PRODUCTS[0]])
        await ctx.reload("products")

        assert ctx.selected_ids() == ["p1", "p2"]
        assert ctx.all_selected

    def test_toggle_and_select_all(self):
        ctx = AppContext(_services())
        ctx.products = list(PRODUCTS)

        assert ctx.toggle_selection("p2") is True
        ctx.select_all()
        assert ctx.selected_ids() == ["p2", "p1"]
        assert ctx.toggle_selection("p2") is False
        ctx.clear_selection()
        assert ctx.selected_ids() == []

    def test_shop_name_uses_current_shop(self):
        ctx = AppContext(_services())
        ctx.shops = [Shop(id="s1", name="Zara Home", floor="Ground", category="Fashion")]

        assert ctx.shop_name_for(PRODUCTS[0]) == "Zara Home"
        assert ctx.shop_name_for(PRODUCTS[1]) == "Apple"

    def test_reset_clears_everything(self):
        ctx = AppContext(_services())
        ctx.shops = list(SHOPS)
        ctx.role = "admin"
        ctx.toggle_selection("p1")
        generation = ctx.generation

        ctx.reset()

        assert ctx.shops == []
        assert ctx.role is None
        assert ctx.selected_ids() == []
        assert ctx.generation == generation + 1
