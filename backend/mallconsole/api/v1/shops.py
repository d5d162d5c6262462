"""Shops API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from mallconsole.console import MallConsole
from mallconsole.core.exceptions import AuthError, NotFoundError
from mallconsole.dependencies import detail_payload, get_signed_in_console, http_error, raise_for_result, respond
from mallconsole.schemas.common import ApiResponse
from mallconsole.schemas.shop import ShopForm

router = APIRouter()


def _dump(shops) -> list:
    return [s.model_dump(mode="json", by_alias=True) for s in shops]


async def _on_page(console: MallConsole) -> None:
    if console.context.current_page != "shops":
        await console.navigate("shops")


@router.get("", response_model=ApiResponse)
async def list_shops(
    floor: str = Query("", description="Only shops on this floor"),
    category: str = Query("", description="Only shops in this category"),
    console: MallConsole = Depends(get_signed_in_console),
):
    """Shops page with floor/category filters (combined with AND)."""
    await _on_page(console)
    html = console.set_shop_filters(floor=floor, category=category)
    shops = console.filters.shops.apply(console.context.shops)
    return respond(console, {"items": _dump(shops), "html": html})


@router.get("/search", response_model=ApiResponse)
async def search_shops(
    q: Optional[str] = Query(None, description="Matches name, description, category or floor"),
    console: MallConsole = Depends(get_signed_in_console),
):
    """Replace the shop list with search results. Clears the shop filters."""
    await _on_page(console)
    await console.search("shops", q)
    return respond(console, {"items": _dump(console.context.shops), "html": console.screen})


@router.get("/form", response_model=ApiResponse)
async def new_shop_form(console: MallConsole = Depends(get_signed_in_console)):
    """Open the empty 'Add Shop' modal (admin only)."""
    try:
        state = console.open_shop_form()
    except AuthError as e:
        raise http_error(console, e.code, e.message) from e
    return respond(console, {"title": state.title, "form": state.form.model_dump(mode="json"), "html": console.modal})


@router.get("/{shop_id}/form", response_model=ApiResponse)
async def edit_shop_form(shop_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Open the 'Edit Shop' modal populated from the loaded shop (admin only)."""
    try:
        state = console.open_shop_form(shop_id)
    except (AuthError, NotFoundError) as e:
        raise http_error(console, e.code, e.message) from e
    return respond(console, {"title": state.title, "form": state.form.model_dump(mode="json"), "html": console.modal})


@router.get("/{shop_id}", response_model=ApiResponse)
async def get_shop(shop_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Get one shop with its detail summary."""
    result = await console.view_shop(shop_id)
    raise_for_result(console, result)
    return respond(console, detail_payload(result.data))


@router.post("", response_model=ApiResponse, status_code=201)
async def create_shop(body: ShopForm, console: MallConsole = Depends(get_signed_in_console)):
    """Create a shop (admin only)."""
    result = await console.submit_shop_form(body)
    raise_for_result(console, result)
    return respond(console, {"id": result.id, "html": console.screen})


@router.put("/{shop_id}", response_model=ApiResponse)
async def update_shop(shop_id: str, body: ShopForm, console: MallConsole = Depends(get_signed_in_console)):
    """Update a shop with the supplied, non-empty fields (admin only)."""
    result = await console.submit_shop_form(body, shop_id)
    raise_for_result(console, result)
    return respond(console, {"id": result.id, "html": console.screen})


@router.delete("/{shop_id}", response_model=ApiResponse)
async def delete_shop(shop_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Delete a shop after confirmation (admin only). Its products keep their shopId."""
    result = await console.delete_shop(shop_id)
    if result is None:
        return respond(console, {"id": shop_id, "deleted": False})
    raise_for_result(console, result)
    return respond(console, {"id": shop_id, "deleted": True, "html": console.screen})
