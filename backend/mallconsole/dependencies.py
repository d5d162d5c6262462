"""FastAPI dependency providers and result-to-HTTP helpers."""

from typing import Any, List, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mallconsole.console import MallConsole, QueuedNotifier
from mallconsole.schemas.common import ApiResponse, ServiceResult

_bearer_scheme = HTTPBearer(auto_error=False)

# ErrorDetail.code -> HTTP status
ERROR_STATUS = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "auth_error": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "remote_error": status.HTTP_502_BAD_GATEWAY,
}


def get_console(request: Request) -> MallConsole:
    """The console session hosted by this application."""
    return request.app.state.console


async def get_signed_in_console(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    console: MallConsole = Depends(get_console),
) -> MallConsole:
    """Require a bearer token whose subject is the console's signed-in identity.

    Raises 401 if the token is missing or invalid, or belongs to someone else.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    uid = console.gateway.provider.verify_id_token(credentials.credentials)
    if not uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = console.context.identity
    if identity is None or identity.uid != uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please sign in again.",
        )
    return console


def drain_notifications(console: MallConsole) -> List[str]:
    if isinstance(console.notifier, QueuedNotifier):
        return console.notifier.drain()
    return []


def http_error(console: MallConsole, code: str, message: str, auth_status: int = status.HTTP_403_FORBIDDEN) -> HTTPException:
    """Build the HTTPException for a console error code.

    Pending notifications are dropped; the error detail carries the message.
    """
    drain_notifications(console)
    status_code = auth_status if code == "auth_error" else ERROR_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=status_code, detail=message)


def raise_for_result(console: MallConsole, result: ServiceResult, auth_status: int = status.HTTP_403_FORBIDDEN) -> None:
    """Raise if a ``ServiceResult`` failed."""
    if not result.success:
        raise http_error(console, result.error.code, result.error.message, auth_status)


def respond(console: MallConsole, data: Any) -> ApiResponse:
    """Wrap data in the standard envelope along with any queued notifications."""
    return ApiResponse(status="success", data=data, notifications=drain_notifications(console))


def detail_payload(view: dict) -> dict:
    """JSON payload for a console "View" result: the document plus its detail text."""
    return {"item": view["item"].model_dump(mode="json", by_alias=True), "detail": view["detail"]}
