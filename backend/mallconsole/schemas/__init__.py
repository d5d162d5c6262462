"""Pydantic schemas for the console.

Document models, typed form data and request/response models.
"""

from mallconsole.schemas.auth import (
    Identity,
    LoginRequest,
    RegisterRequest,
    SessionResponse,
    SignInResult,
    TokenResponse,
)
from mallconsole.schemas.common import ApiResponse, ErrorDetail, ErrorResponse, ServiceResult
from mallconsole.schemas.health import HealthCheckResponse
from mallconsole.schemas.offer import Offer, OfferForm
from mallconsole.schemas.product import Product, ProductForm
from mallconsole.schemas.shop import Shop, ShopForm

__all__ = [
    # Common
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "ServiceResult",
    "HealthCheckResponse",
    # Auth
    "Identity",
    "LoginRequest",
    "RegisterRequest",
    "SessionResponse",
    "SignInResult",
    "TokenResponse",
    # Documents and forms
    "Offer",
    "OfferForm",
    "Product",
    "ProductForm",
    "Shop",
    "ShopForm",
]
