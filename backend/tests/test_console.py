"""Tests for the console session: sign-in flow, forms, deletes and comparison."""

from unittest.mock import AsyncMock

import pytest

from mallconsole.console import ADMIN_REQUIRED, COMPARE_MESSAGE, MallConsole, QueuedNotifier
from mallconsole.core.exceptions import AuthError, NotFoundError, RemoteError
from mallconsole.schemas.common import ServiceResult
from mallconsole.schemas.shop import ShopForm
from mallconsole.store.document_store import DocumentStore

ADMIN_EMAIL = "admin@supermall.com"
USER_EMAIL = "shopper@supermall.com"
PASSWORD = "secret123"


async def _seed_shop(console: MallConsole, name="Zara", floor="Ground", category="Fashion") -> str:
    result = await console.submit_shop_form(ShopForm(name=name, floor=floor, category=category))
    assert result.success
    return result.id


class TestSignInFlow:
    async def test_login_screen_before_sign_in(self, console: MallConsole):
        assert 'id="loginForm"' in console.screen
        assert not console.signed_in

    async def test_unknown_email_shows_login_error(self, console: MallConsole):
        result = await console.login("nobody@supermall.com", PASSWORD)

        assert not result.success
        assert console.login_error == "No account found with this email."
        assert console.context.identity is None
        assert 'id="loginError">No account found with this email.' in console.screen

    async def test_register_does_not_sign_in(self, console: MallConsole):
        result = await console.register(USER_EMAIL, PASSWORD)

        assert result.success
        assert not console.signed_in
        assert console.register_error is None

    async def test_register_error_is_shown(self, console: MallConsole):
        await console.register(USER_EMAIL, PASSWORD)

        await console.register(USER_EMAIL, PASSWORD)

        assert console.register_error == "Email is already registered."
        assert 'id="registerError"' in console.screen

    async def test_sign_in_loads_and_renders_dashboard(self, console: MallConsole, store: DocumentStore):
        await store.collection("shops").add({"name": "Zara", "floor": "Ground", "category": "Fashion"})
        await console.register(ADMIN_EMAIL, PASSWORD, "admin")

        await console.login(ADMIN_EMAIL, PASSWORD)

        assert console.signed_in
        assert console.context.role == "admin"
        assert [s.name for s in console.context.shops] == ["Zara"]
        assert console.context.current_page == "dashboard"
        assert '<h1 id="pageTitle">Dashboard</h1>' in console.screen
        assert "Zara" in console.screen

    async def test_sign_out_resets_context(self, admin_console: MallConsole):
        await _seed_shop(admin_console)
        admin_console.context.toggle_selection("anything")
        admin_console.filters.shops.floor = "Ground"

        result = await admin_console.logout()

        assert result.success
        assert admin_console.context.identity is None
        assert admin_console.context.role is None
        assert admin_console.context.shops == []
        assert admin_console.context.selected_ids() == []
        assert admin_console.filters.shops.floor == ""
        assert 'id="loginForm"' in admin_console.screen

    async def test_sign_in_as_another_identity_resets_session(self, admin_console: MallConsole):
        await _seed_shop(admin_console)
        admin_console.toggle_product_selection("p-1")
        admin_console.set_shop_filters(floor="Ground")
        admin_console.open_shop_form()
        generation = admin_console.context.generation

        await admin_console.register(USER_EMAIL, PASSWORD, "user")
        await admin_console.login(USER_EMAIL, PASSWORD)

        assert admin_console.context.identity.email == USER_EMAIL
        assert admin_console.context.role == "user"
        assert admin_console.context.generation > generation
        assert admin_console.context.selected_ids() == []
        assert admin_console.filters.shops.floor == ""
        assert admin_console.modal is None
        assert admin_console.active_form is None
        assert [s.name for s in admin_console.context.shops] == ["Zara"]

    async def test_malformed_document_does_not_break_sign_in(
        self, console: MallConsole, store: DocumentStore, notifier: QueuedNotifier
    ):
        await store.collection("shops").add({"name": "Zara", "floor": "Ground", "category": "Fashion"})
        await store.collection("products").add({"name": "Broken", "shopId": "s1", "price": "abc"})
        await console.register(ADMIN_EMAIL, PASSWORD, "admin")

        result = await console.login(ADMIN_EMAIL, PASSWORD)

        assert result.success
        assert console.signed_in
        assert [s.name for s in console.context.shops] == ["Zara"]
        messages = notifier.drain()
        assert len(messages) == 1
        assert messages[0].startswith("Malformed product document")


class TestNavigation:
    async def test_navigate_renders_page(self, admin_console: MallConsole):
        await _seed_shop(admin_console)

        await admin_console.navigate("shops")

        assert admin_console.context.current_page == "shops"
        assert '<h1 id="pageTitle">Shops</h1>' in admin_console.screen
        assert "Zara" in admin_console.screen

    async def test_navigate_reloads_collections(self, admin_console: MallConsole, store: DocumentStore):
        await store.collection("shops").add({"name": "Added Elsewhere", "floor": "First", "category": "Books"})

        await admin_console.navigate("shops")

        assert "Added Elsewhere" in admin_console.screen

    async def test_unknown_page(self, admin_console: MallConsole):
        with pytest.raises(ValueError):
            await admin_console.navigate("warehouse")

    async def test_load_failure_alerts_once(self, admin_console: MallConsole, notifier: QueuedNotifier):
        admin_console.services.shops.list_all = AsyncMock(
            return_value=ServiceResult.fail(RemoteError("Shops are unavailable"))
        )

        await admin_console.navigate("shops")

        assert notifier.drain() == ["Shops are unavailable"]

    async def test_search_then_clear(self, admin_console: MallConsole):
        await _seed_shop(admin_console, "Zara")
        await _seed_shop(admin_console, "Apple", "First", "Electronics")
        await admin_console.navigate("shops")
        admin_console.set_shop_filters(floor="Ground")

        await admin_console.search("shops", "apple")

        assert [s.name for s in admin_console.context.shops] == ["Apple"]
        assert admin_console.filters.shops.floor == ""

        await admin_console.search("shops", "")
        assert len(admin_console.context.shops) == 2


class TestForms:
    async def test_non_admin_cannot_submit(self, user_console: MallConsole, notifier: QueuedNotifier, store: DocumentStore):
        result = await user_console.submit_shop_form(ShopForm(name="Zara", floor="Ground", category="Fashion"))

        assert result.error.message == ADMIN_REQUIRED
        assert notifier.drain() == [ADMIN_REQUIRED]
        assert await store.collection("shops").get_all() == []

    async def test_non_admin_cannot_open_form(self, user_console: MallConsole):
        with pytest.raises(AuthError):
            user_console.open_shop_form()

    async def test_submit_creates_reloads_and_renders(self, admin_console: MallConsole):
        await admin_console.navigate("shops")
        admin_console.open_shop_form()

        result = await admin_console.submit_shop_form({"name": "  Zara  ", "floor": "Ground", "category": "Fashion"})

        assert result.success
        assert admin_console.modal is None
        assert [s.name for s in admin_console.context.shops] == ["Zara"]
        assert admin_console.context.is_fresh("shops")
        assert "Zara" in admin_console.screen

    async def test_validation_failure_alerts_once(self, admin_console: MallConsole, notifier: QueuedNotifier):
        admin_console.open_shop_form()

        result = await admin_console.submit_shop_form(ShopForm(name="Zara"))

        assert result.error.code == "validation_error"
        assert notifier.drain() == ["Name, floor, and category are required"]
        assert admin_console.modal is not None

    async def test_malformed_form_input_alerts_once(
        self, admin_console: MallConsole, notifier: QueuedNotifier, store: DocumentStore
    ):
        admin_console.open_offer_form()

        result = await admin_console.submit_offer_form(
            {"title": "Sale", "shopId": "s1", "discount": 10, "validUntil": "31/12/2030"}
        )

        assert result.error.code == "validation_error"
        messages = notifier.drain()
        assert len(messages) == 1
        assert messages[0].startswith("Invalid validUntil")
        assert admin_console.modal is not None
        assert await store.collection("offers").get_all() == []

    async def test_edit_form_prefilled(self, admin_console: MallConsole):
        shop_id = await _seed_shop(admin_console)

        state = admin_console.open_shop_form(shop_id)

        assert state.is_edit
        assert state.title == "Edit Shop"
        assert state.form.name == "Zara"
        assert 'value="Zara"' in admin_console.modal

    async def test_edit_missing_document(self, admin_console: MallConsole):
        with pytest.raises(NotFoundError):
            admin_console.open_product_form("missing")

    async def test_product_submit_snapshots_shop_name(self, admin_console: MallConsole, store: DocumentStore):
        shop_id = await _seed_shop(admin_console)

        result = await admin_console.submit_product_form({"name": "Jeans", "shopId": shop_id, "price": "49.99"})

        assert result.success
        record = await store.collection("products").get(result.id)
        assert record["shopName"] == "Zara"
        assert record["price"] == 49.99

    async def test_update_shop(self, admin_console: MallConsole):
        shop_id = await _seed_shop(admin_console)

        result = await admin_console.submit_shop_form(ShopForm(floor="Second"), shop_id)

        assert result.success
        shop = admin_console.context.find("shops", shop_id)
        assert shop.floor == "Second"
        assert shop.name == "Zara"


class TestDelete:
    async def test_delete_confirmed(self, admin_console: MallConsole, notifier: QueuedNotifier):
        shop_id = await _seed_shop(admin_console)

        result = await admin_console.delete_shop(shop_id)

        assert result.success
        assert notifier.confirmations == ["Are you sure you want to delete this shop?"]
        assert admin_console.context.shops == []

    async def test_delete_cancelled(self, gateway, services, store: DocumentStore):
        notifier = QueuedNotifier(auto_confirm=False)
        console = MallConsole(gateway, services, notifier)
        await console.register(ADMIN_EMAIL, PASSWORD, "admin")
        await console.login(ADMIN_EMAIL, PASSWORD)
        shop_id = await _seed_shop(console)

        result = await console.delete_shop(shop_id)

        assert result is None
        assert await store.collection("shops").get(shop_id) is not None

    async def test_non_admin_cannot_delete(self, user_console: MallConsole, notifier: QueuedNotifier):
        result = await user_console.delete_offer("o1")

        assert result.error.message == ADMIN_REQUIRED
        assert notifier.confirmations == []


class TestCompare:
    async def test_compare_needs_two_products(self, admin_console: MallConsole, notifier: QueuedNotifier):
        admin_console.toggle_product_selection("p1")

        result = await admin_console.compare_products()

        assert not result.success
        assert notifier.drain() == [COMPARE_MESSAGE]
        assert admin_console.compare_panel is None

    async def test_compare_selected_products(self, admin_console: MallConsole):
        shop_id = await _seed_shop(admin_console)
        first = await admin_console.submit_product_form({"name": "Jeans", "shopId": shop_id, "price": 50})
        second = await admin_console.submit_product_form({"name": "Jacket", "shopId": shop_id, "price": 120})
        admin_console.select_all_products()
        admin_console.toggle_product_selection("gone")

        result = await admin_console.compare_products()

        assert [p.id for p in result.data] == [first.id, second.id]
        assert admin_console.compare_panel.count('class="compare-product"') == 2

    async def test_user_can_view_details(self, user_console: MallConsole, store: DocumentStore):
        shop_id = await store.collection("shops").add({"name": "Zara", "floor": "Ground", "category": "Fashion"})
        await user_console.refresh()

        result = await user_console.view_shop(shop_id)

        assert result.success
        assert result.data["item"].name == "Zara"
        assert "Shop: Zara" in result.data["detail"]

    async def test_view_missing_document(self, user_console: MallConsole, notifier: QueuedNotifier):
        result = await user_console.view_product("missing")

        assert result.error.code == "not_found"
        assert notifier.drain() == ["Product not found"]
