"""Products API endpoints, including selection and comparison."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from mallconsole.console import MallConsole
from mallconsole.core.exceptions import AuthError, NotFoundError
from mallconsole.dependencies import detail_payload, get_signed_in_console, http_error, raise_for_result, respond
from mallconsole.schemas.common import ApiResponse
from mallconsole.schemas.product import ProductForm

router = APIRouter()


def _dump(products) -> list:
    return [p.model_dump(mode="json", by_alias=True) for p in products]


async def _on_page(console: MallConsole) -> None:
    if console.context.current_page != "products":
        await console.navigate("products")


@router.get("", response_model=ApiResponse)
async def list_products(
    category: str = Query("", description="Only products in this category"),
    min_price: Optional[float] = Query(None, ge=0, description="Inclusive lower price bound"),
    max_price: Optional[float] = Query(None, ge=0, description="Inclusive upper price bound"),
    console: MallConsole = Depends(get_signed_in_console),
):
    """Products page with category and price range filters (combined with AND)."""
    await _on_page(console)
    html = console.set_product_filters(category=category, min_price=min_price, max_price=max_price)
    products = console.filters.products.apply(console.context.products)
    return respond(console, {"items": _dump(products), "html": html})


@router.get("/search", response_model=ApiResponse)
async def search_products(
    q: Optional[str] = Query(None, description="Matches name, description, brand, category or shop name"),
    console: MallConsole = Depends(get_signed_in_console),
):
    """Replace the product list with search results. Clears the product filters."""
    await _on_page(console)
    await console.search("products", q)
    return respond(console, {"items": _dump(console.context.products), "html": console.screen})


@router.get("/form", response_model=ApiResponse)
async def new_product_form(console: MallConsole = Depends(get_signed_in_console)):
    """Open the empty 'Add Product' modal (admin only)."""
    try:
        state = console.open_product_form()
    except AuthError as e:
        raise http_error(console, e.code, e.message) from e
    return respond(console, {"title": state.title, "form": state.form.model_dump(mode="json"), "html": console.modal})


@router.post("/selection/all", response_model=ApiResponse)
async def select_all_products(
    checked: bool = Query(True, description="Select every loaded product, or clear the selection"),
    console: MallConsole = Depends(get_signed_in_console),
):
    """Select (or unselect) every product in the current list."""
    selected = console.select_all_products(checked)
    return respond(console, {"selected": selected})


@router.post("/compare", response_model=ApiResponse)
async def compare_products(console: MallConsole = Depends(get_signed_in_console)):
    """Compare the selected products side by side (at least two)."""
    result = await console.compare_products()
    raise_for_result(console, result)
    return respond(console, {"items": _dump(result.data), "html": console.compare_panel})


@router.get("/{product_id}/form", response_model=ApiResponse)
async def edit_product_form(product_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Open the 'Edit Product' modal populated from the loaded product (admin only)."""
    try:
        state = console.open_product_form(product_id)
    except (AuthError, NotFoundError) as e:
        raise http_error(console, e.code, e.message) from e
    return respond(console, {"title": state.title, "form": state.form.model_dump(mode="json"), "html": console.modal})


@router.post("/{product_id}/selection", response_model=ApiResponse)
async def toggle_product_selection(product_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Toggle one product in the comparison selection."""
    selected = console.toggle_product_selection(product_id)
    return respond(console, {"id": product_id, "selected": selected, "selection": console.context.selected_ids()})


@router.get("/{product_id}", response_model=ApiResponse)
async def get_product(product_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Get one product with its detail summary."""
    result = await console.view_product(product_id)
    raise_for_result(console, result)
    return respond(console, detail_payload(result.data))


@router.post("", response_model=ApiResponse, status_code=201)
async def create_product(body: ProductForm, console: MallConsole = Depends(get_signed_in_console)):
    """Create a product (admin only). The shop name is taken from the selected shop."""
    result = await console.submit_product_form(body)
    raise_for_result(console, result)
    return respond(console, {"id": result.id, "html": console.screen})


@router.put("/{product_id}", response_model=ApiResponse)
async def update_product(product_id: str, body: ProductForm, console: MallConsole = Depends(get_signed_in_console)):
    """Update a product with the supplied, non-empty fields (admin only)."""
    result = await console.submit_product_form(body, product_id)
    raise_for_result(console, result)
    return respond(console, {"id": result.id, "html": console.screen})


@router.delete("/{product_id}", response_model=ApiResponse)
async def delete_product(product_id: str, console: MallConsole = Depends(get_signed_in_console)):
    """Delete a product after confirmation (admin only)."""
    result = await console.delete_product(product_id)
    if result is None:
        return respond(console, {"id": product_id, "deleted": False})
    raise_for_result(console, result)
    return respond(console, {"id": product_id, "deleted": True, "html": console.screen})
