"""Page navigation endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from mallconsole.console import MallConsole
from mallconsole.dependencies import get_signed_in_console, respond
from mallconsole.schemas.common import ApiResponse
from mallconsole.views.pages import PAGES

router = APIRouter()


@router.get("/{page}", response_model=ApiResponse)
async def navigate(page: str, console: MallConsole = Depends(get_signed_in_console)):
    """Navigate to a page: load what it needs and return the rendered screen."""
    if page not in PAGES:
        raise HTTPException(status_code=404, detail=f"Unknown page: {page}")

    outcome = await console.navigate(page)
    return respond(
        console,
        {
            "page": console.context.current_page,
            "html": console.screen,
            "loaded": outcome.applied,
            "failed": sorted(outcome.errors),
        },
    )


@router.post("/refresh", response_model=ApiResponse)
async def refresh(console: MallConsole = Depends(get_signed_in_console)):
    """Reload every collection and re-render the current page."""
    outcome = await console.refresh()
    return respond(
        console,
        {"page": console.context.current_page, "html": console.screen, "loaded": outcome.applied},
    )
