"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from mallconsole.console import MallConsole
from mallconsole.dependencies import (
    drain_notifications,
    get_console,
    get_signed_in_console,
    raise_for_result,
    respond,
)
from mallconsole.schemas.auth import LoginRequest, RegisterRequest, SessionResponse, TokenResponse
from mallconsole.schemas.common import ApiResponse

router = APIRouter()


def _session(console: MallConsole) -> dict:
    identity = console.context.identity
    return SessionResponse(
        uid=identity.uid,
        email=identity.email,
        role=console.context.role or "user",
    ).model_dump()


@router.post("/register", response_model=ApiResponse, status_code=201)
async def register(body: RegisterRequest, console: MallConsole = Depends(get_console)):
    """Register a new account. The account must sign in afterwards."""
    result = await console.register(body.email, body.password, body.role)
    raise_for_result(console, result, auth_status=status.HTTP_400_BAD_REQUEST)
    return respond(console, {"uid": result.id, "email": result.data.email, "role": body.role})


@router.post("/login", response_model=ApiResponse)
async def login(body: LoginRequest, console: MallConsole = Depends(get_console)):
    """Sign in with email and password; returns a bearer token for this session."""
    result = await console.login(body.email, body.password)
    raise_for_result(console, result, auth_status=status.HTTP_401_UNAUTHORIZED)

    identity = result.data.identity
    return respond(
        console,
        {
            "user": _session(console),
            "token": TokenResponse(access_token=identity.id_token).model_dump(),
        },
    )


@router.post("/logout", response_model=ApiResponse)
async def logout(console: MallConsole = Depends(get_signed_in_console)):
    """Sign out and reset the console session."""
    result = await console.logout()
    raise_for_result(console, result, auth_status=status.HTTP_502_BAD_GATEWAY)
    return respond(console, {"signed_out": True})


@router.get("/me", response_model=ApiResponse)
async def get_me(console: MallConsole = Depends(get_signed_in_console)):
    """Get the signed-in identity and its role."""
    return respond(console, _session(console))


@router.get("/screen", response_model=ApiResponse)
async def get_login_screen(console: MallConsole = Depends(get_console)):
    """The login screen, with the last login/registration error if any."""
    if console.signed_in:
        drain_notifications(console)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already signed in")
    return respond(console, {"html": console.render()})
