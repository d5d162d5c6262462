"""Offers API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from mallconsole.console import MallConsole
from mallconsole.core.exceptions import AuthError, NotFoundError
from mallconsole.dependencies import detail_payload, get_signed_in_console, http_error, raise_for_result, respond
from mallconsole.schemas.common import ApiResponse
from mallconsole.schemas.offer import OfferForm

router = APIRouter()


def _dump(offers) -> list:
    return [o.model_dump(mode="json", by_alias=True) for o in offers]


async def _on_page(console: MallConsole) -> None:
    if console.context.current_page != "offers":
        await console.navigate("offers")


@router.get("", response_model=ApiResponse)
async def list_offers(
    active_only: bool = Query(True, description="Only offers that are currently active"),
    console: MallConsole = Depends(get_signed_in_console),
):
    """Offers page, by default limited to currently active offers."""
    await _on_page(console)
    html = console.set_offer_filters(active_only=active_only)
    offers = console.filters.offers.apply(console.context.offers)
    return respond(console, {"items": _dump(offers), "html": html})


@router.get("/active", response_model=ApiResponse)
async def list_active_offers(console: MallConsole = Depends(get_signed_in_console)):
    """Currently active offers, straight from the store."""
    result = await console.services.offers.list_active()
    raise_for_result(console, result)
    return respond(console, {"items": _dump(result.data)})


@router.get("/search", response_model=ApiResponse)
async def search_offers(
    q: Optional[str] = Query(None, description="Matches title, description or shop name"),
    console: MallConsole = Depends(get_signed_in_console),
):
    """Replace the offer list with search results. Clears the offer filter."""
    await _on_page(console)
    await console.search("offers", q)
    return respond(console, {"items": _dump(console.context.offers), "html": console.screen})


@router.get("/form", response_model=ApiResponse)
async def new_offer_form(console: MallConsole = Depends(get_signed_in_console)):
    """Open the empty 'Add Offer' modal (admin only)."""
    try:
        state = console.open_offer_form()
    except AuthError as e:
        raise http_error(console, e.code, e.message) from e
    return respond(console, {"title": state.title, "form": state.form.model_dump(mode="json"), "html": console.modal})


@router.get("/{offer_id}/form", response_model=ApiResponse)
async def edit_offer_form(offer_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Open the 'Edit Offer' modal populated from the loaded offer (admin only)."""
    try:
        state = console.open_offer_form(offer_id)
    except (AuthError, NotFoundError) as e:
        raise http_error(console, e.code, e.message) from e
    return respond(console, {"title": state.title, "form": state.form.model_dump(mode="json"), "html": console.modal})


@router.get("/{offer_id}", response_model=ApiResponse)
async def get_offer(offer_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Get one offer with its detail summary."""
    result = await console.view_offer(offer_id)
    raise_for_result(console, result)
    return respond(console, detail_payload(result.data))


@router.post("", response_model=ApiResponse, status_code=201)
async def create_offer(body: OfferForm, console: MallConsole = Depends(get_signed_in_console)):
    """Create an offer (admin only). The shop name is taken from the selected shop."""
    result = await console.submit_offer_form(body)
    raise_for_result(console, result)
    return respond(console, {"id": result.id, "html": console.screen})


@router.put("/{offer_id}", response_model=ApiResponse)
async def update_offer(offer_id: str, body: OfferForm, console: MallConsole = Depends(get_signed_in_console)):
    """Update an offer with the supplied fields (admin only)."""
    result = await console.submit_offer_form(body, offer_id)
    raise_for_result(console, result)
    return respond(console, {"id": result.id, "html": console.screen})


@router.delete("/{offer_id}", response_model=ApiResponse)
async def delete_offer(offer_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Delete an offer after confirmation (admin only)."""
    result = await console.delete_offer(offer_id)
    if result is None:
        return respond(console, {"id": offer_id, "deleted": False})
    raise_for_result(console, result)
    return respond(console, {"id": offer_id, "deleted": True, "html": console.screen})
