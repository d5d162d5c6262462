"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text

from mallconsole.console import MallConsole
from mallconsole.dependencies import get_console
from mallconsole.schemas.health import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(console: MallConsole = Depends(get_console)):
    """Return service health status.

    Checks that the document store's database answers, and reports whether
    someone is signed in to the console session.
    """
    services = {}

    try:
        async with console.services.shops.store.session() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    services["database"] = db_status
    services["session"] = "signed_in" if console.signed_in else "signed_out"

    return HealthCheckResponse(
        status="ok" if db_status == "ok" else "degraded",
        database=db_status,
        services=services,
    )
