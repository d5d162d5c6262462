"""Console session: navigation, forms and the sync between data and screen.

``MallConsole`` listens to the identity gateway. When someone signs in it
loads every collection into its ``AppContext`` and renders the dashboard;
when they sign out it resets the context and shows the login screen. User
actions (navigate, search, filter, submit, delete, select, compare) go
through the resource services, reload what they touched and re-render
``screen``.

Failures are surfaced through the notifier exactly once and never retried.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import structlog

from mallconsole.core.exceptions import AuthError, NotFoundError, ValidationError
from mallconsole.schemas.auth import Identity
from mallconsole.schemas.common import ServiceResult
from mallconsole.schemas.offer import OfferForm
from mallconsole.schemas.product import Product, ProductForm
from mallconsole.schemas.shop import ShopForm
from mallconsole.services.identity_gateway import IdentityGateway
from mallconsole.services.resource_service import parse_form
from mallconsole.state.context import COLLECTIONS, AppContext, LoadOutcome, ResourceServices
from mallconsole.views.auth import render_login
from mallconsole.views.compare import render_compare
from mallconsole.views.details import describe_offer, describe_product, describe_shop
from mallconsole.views.filters import ViewFilters
from mallconsole.views.forms import FormState, render_form_modal
from mallconsole.views.pages import PAGES, render_page

logger = structlog.get_logger(__name__)

# Collections each page renders from
PAGE_COLLECTIONS: Dict[str, Tuple[str, ...]] = {
    "dashboard": COLLECTIONS,
    "shops": ("shops",),
    "products": ("products", "shops"),
    "offers": ("offers", "shops"),
    "categories": ("shops", "products"),
    "floors": ("shops",),
    "reports": ("shops", "products"),
    "settings": (),
}

ADMIN_REQUIRED = "Admin access required."
COMPARE_MINIMUM = 2
COMPARE_MESSAGE = "Please select at least 2 products to compare"

# kind -> (collection, resource name, form model, form from document)
RESOURCES = {
    "shop": ("shops", "Shop", ShopForm, ShopForm.from_shop),
    "product": ("products", "Product", ProductForm, ProductForm.from_product),
    "offer": ("offers", "Offer", OfferForm, OfferForm.from_offer),
}


class Notifier:
    """Blocking user notifications (``alert`` / ``confirm`` dialogs)."""

    def alert(self, message: str) -> None:
        raise NotImplementedError

    def confirm(self, message: str) -> bool:
        raise NotImplementedError


class QueuedNotifier(Notifier):
    """Collects alerts until they are drained; answers confirms with a preset reply."""

    def __init__(self, auto_confirm: bool = True):
        self.auto_confirm = auto_confirm
        self.messages: List[str] = []
        self.confirmations: List[str] = []

    def alert(self, message: str) -> None:
        self.messages.append(message)

    def confirm(self, message: str) -> bool:
        self.confirmations.append(message)
        return self.auto_confirm

    def drain(self) -> List[str]:
        messages, self.messages = self.messages, []
        return messages


class MallConsole:
    """One console session bound to an identity gateway and the resource services."""

    def __init__(
        self,
        gateway: IdentityGateway,
        services: ResourceServices,
        notifier: Optional[Notifier] = None,
    ):
        self.gateway = gateway
        self.services = services
        self.notifier = notifier or QueuedNotifier()
        self.context = AppContext(services)
        self.filters = ViewFilters()
        self.login_error: Optional[str] = None
        self.register_error: Optional[str] = None
        self.active_form: Optional[FormState] = None
        self.modal: Optional[str] = None
        self.compare_panel: Optional[str] = None
        self.screen = render_login()
        self.logger = logger.bind(service="mall_console")
        self._unsubscribe = gateway.subscribe(self._on_identity_change)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def signed_in(self) -> bool:
        return self.context.identity is not None

    async def _on_identity_change(self, identity: Optional[Identity], role: Optional[str]) -> None:
        if identity is None:
            self.context.reset()
            self.filters = ViewFilters()
            self._close_panels()
            self.render()
            self.logger.info("session_ended")
            return

        previous = self.context.identity
        if previous is not None and previous.uid != identity.uid:
            # Another identity took over the session without a sign-out
            self.context.reset()
            self.filters = ViewFilters()
            self._close_panels()
            self.logger.info("session_replaced", previous_uid=previous.uid)

        self.context.set_identity(identity)
        self.context.set_role(role)
        self.context.current_page = "dashboard"
        self.login_error = None
        self.logger.info("session_started", uid=identity.uid, role=role)

        outcome = await self.context.reload_all()
        if outcome.stale:
            return
        self._report(outcome)
        self.render()

    async def login(self, email: str, password: str) -> ServiceResult:
        self.login_error = None
        result = await self.gateway.sign_in(email, password)
        if not result.success:
            self.login_error = result.error.message
            self.logger.warning("login_failed", error=self.login_error)
            self.render()
        return result

    async def register(self, email: str, password: str, role: str = "user") -> ServiceResult:
        """Create an account. The new account still has to sign in."""
        self.register_error = None
        result = await self.gateway.sign_up(email, password, role)
        if not result.success:
            self.register_error = result.error.message
            self.logger.warning("registration_failed", error=self.register_error)
        self.render()
        return result

    async def logout(self) -> ServiceResult:
        result = await self.gateway.sign_out()
        if not result.success:
            self.notifier.alert(result.error.message)
        return result

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        if not self.signed_in:
            self.screen = render_login(self.login_error, self.register_error)
        else:
            self.screen = render_page(self.context, self.filters)
        return self.screen

    def _report(self, outcome: LoadOutcome) -> None:
        if outcome.errors:
            self.notifier.alert(outcome.first_error)

    def _close_panels(self) -> None:
        self.active_form = None
        self.modal = None
        self.compare_panel = None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def navigate(self, page: str) -> LoadOutcome:
        """Switch page, load what it needs unless fresh, render.

        A navigation that is overtaken by a later one writes nothing.
        """
        if page not in PAGES:
            raise ValueError(f"Unknown page: {page}")

        self.context.advance()
        self.context.current_page = page
        self._close_panels()
        self.logger.info("navigated", page=page)

        needed = [c for c in PAGE_COLLECTIONS[page] if not self.context.is_fresh(c)]
        outcome = await self.context.reload(*needed) if needed else LoadOutcome()
        if outcome.stale:
            return outcome

        self._report(outcome)
        self.render()
        return outcome

    async def refresh(self) -> LoadOutcome:
        """Reload every collection and re-render the current page."""
        outcome = await self.context.reload_all()
        if not outcome.stale:
            self._report(outcome)
            self.render()
        return outcome

    # ------------------------------------------------------------------
    # Search and filters
    # ------------------------------------------------------------------

    async def search(self, collection: str, query: Optional[str]) -> LoadOutcome:
        """Replace a list's working set with search results; clears its filters."""
        outcome = await self.context.search(collection, query)
        if outcome.stale:
            return outcome
        self.filters.clear(collection)
        self._report(outcome)
        self.render()
        return outcome

    def set_shop_filters(self, floor: str = "", category: str = "") -> str:
        self.filters.shops.floor = floor or ""
        self.filters.shops.category = category or ""
        return self.render()

    def set_product_filters(
        self,
        category: str = "",
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> str:
        self.filters.products.category = category or ""
        self.filters.products.min_price = min_price
        self.filters.products.max_price = max_price
        return self.render()

    def set_offer_filters(self, active_only: bool = True) -> str:
        self.filters.offers.active_only = active_only
        return self.render()

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------

    def _require_admin(self) -> None:
        if not self.context.is_admin:
            raise AuthError(ADMIN_REQUIRED)

    def _lookup(self, kind: str, doc_id: str) -> Any:
        collection, resource_name, _, _ = RESOURCES[kind]
        doc = self.context.find(collection, doc_id)
        if doc is None:
            raise NotFoundError(resource_name, doc_id)
        return doc

    def _open_form(self, kind: str, doc_id: Optional[str]) -> FormState:
        self._require_admin()
        _, resource_name, form_model, from_document = RESOURCES[kind]

        if doc_id:
            doc = self._lookup(kind, doc_id)
            form = from_document(doc)
            title = f"Edit {resource_name}"
        else:
            form = form_model()
            title = f"Add {resource_name}"

        state = FormState(
            kind=kind,
            title=title,
            form=form,
            doc_id=doc_id or None,
            shop_options=[(s.id, s.name) for s in self.context.shops],
        )
        self.active_form = state
        self.modal = render_form_modal(state)
        return state

    def open_shop_form(self, shop_id: Optional[str] = None) -> FormState:
        return self._open_form("shop", shop_id)

    def open_product_form(self, product_id: Optional[str] = None) -> FormState:
        return self._open_form("product", product_id)

    def open_offer_form(self, offer_id: Optional[str] = None) -> FormState:
        return self._open_form("offer", offer_id)

    def _with_shop_name(self, form: Union[ProductForm, OfferForm]) -> Union[ProductForm, OfferForm]:
        """Snapshot the selected shop's current name onto the form."""
        if form.shop_id is None:
            return form
        shop = self.context.find("shops", form.shop_id)
        return form.model_copy(update={"shop_name": shop.name if shop else ""})

    async def _submit(self, kind: str, form: Any, doc_id: Optional[str]) -> ServiceResult:
        collection, _, form_model, _ = RESOURCES[kind]
        try:
            self._require_admin()
        except AuthError as e:
            self.notifier.alert(e.message)
            return ServiceResult.fail(e)

        if not isinstance(form, form_model):
            try:
                form = parse_form(form_model, form)
            except ValidationError as e:
                self.notifier.alert(e.message)
                return ServiceResult.fail(e)
        if kind in ("product", "offer"):
            form = self._with_shop_name(form)

        service = self.services.for_collection(collection)
        result = await service.update(doc_id, form) if doc_id else await service.create(form)
        if not result.success:
            self.notifier.alert(result.error.message)
            return result

        self.logger.info("form_submitted", kind=kind, doc_id=result.id, edit=bool(doc_id))
        self.active_form = None
        self.modal = None
        self.context.invalidate(collection)
        outcome = await self.context.reload(collection)
        if not outcome.stale:
            self._report(outcome)
            self.render()
        return result

    async def submit_shop_form(
        self, form: Union[ShopForm, Mapping[str, Any]], shop_id: Optional[str] = None
    ) -> ServiceResult:
        return await self._submit("shop", form, shop_id)

    async def submit_product_form(
        self, form: Union[ProductForm, Mapping[str, Any]], product_id: Optional[str] = None
    ) -> ServiceResult:
        return await self._submit("product", form, product_id)

    async def submit_offer_form(
        self, form: Union[OfferForm, Mapping[str, Any]], offer_id: Optional[str] = None
    ) -> ServiceResult:
        return await self._submit("offer", form, offer_id)

    # ------------------------------------------------------------------
    # Delete and view
    # ------------------------------------------------------------------

    async def _delete(self, kind: str, doc_id: str) -> Optional[ServiceResult]:
        """Confirm, delete, reload. Returns None if the user cancelled."""
        collection = RESOURCES[kind][0]
        try:
            self._require_admin()
        except AuthError as e:
            self.notifier.alert(e.message)
            return ServiceResult.fail(e)

        if not self.notifier.confirm(f"Are you sure you want to delete this {kind}?"):
            return None

        result = await self.services.for_collection(collection).delete(doc_id)
        if not result.success:
            self.notifier.alert(result.error.message)
            return result

        self.context.invalidate(collection)
        outcome = await self.context.reload(collection)
        if not outcome.stale:
            self._report(outcome)
            self.render()
        return result

    async def delete_shop(self, shop_id: str) -> Optional[ServiceResult]:
        return await self._delete("shop", shop_id)

    async def delete_product(self, product_id: str) -> Optional[ServiceResult]:
        return await self._delete("product", product_id)

    async def delete_offer(self, offer_id: str) -> Optional[ServiceResult]:
        return await self._delete("offer", offer_id)

    async def _view(self, kind: str, doc_id: str) -> ServiceResult:
        """Fetch one document for the "View" action.

        On success ``data`` is ``{"item": document, "detail": text}``.
        """
        collection = RESOURCES[kind][0]
        result = await self.services.for_collection(collection).get_by_id(doc_id)
        if not result.success:
            self.notifier.alert(result.error.message)
            return result

        doc = result.data
        if kind == "shop":
            detail = describe_shop(doc)
        elif kind == "product":
            detail = describe_product(self.context, doc)
        else:
            detail = describe_offer(self.context, doc)
        return ServiceResult.ok({"item": doc, "detail": detail}, id=doc_id)

    async def view_shop(self, shop_id: str) -> ServiceResult:
        return await self._view("shop", shop_id)

    async def view_product(self, product_id: str) -> ServiceResult:
        return await self._view("product", product_id)

    async def view_offer(self, offer_id: str) -> ServiceResult:
        return await self._view("offer", offer_id)

    # ------------------------------------------------------------------
    # Selection and comparison
    # ------------------------------------------------------------------

    def toggle_product_selection(self, product_id: str) -> bool:
        selected = self.context.toggle_selection(product_id)
        self.render()
        return selected

    def select_all_products(self, checked: bool = True) -> List[str]:
        if checked:
            self.context.select_all()
        else:
            self.context.clear_selection()
        self.render()
        return self.context.selected_ids()

    async def compare_products(self) -> ServiceResult:
        """Fetch the selected products and render the comparison panel."""
        ids = self.context.selected_ids()
        if len(ids) < COMPARE_MINIMUM:
            self.notifier.alert(COMPARE_MESSAGE)
            return ServiceResult.fail(ValidationError(COMPARE_MESSAGE))

        result = await self.services.products.compare_by_ids(ids)
        if not result.success:
            self.notifier.alert(result.error.message)
            return result

        products: List[Product] = result.data or []
        self.compare_panel = render_compare(self.context, products)
        return result
