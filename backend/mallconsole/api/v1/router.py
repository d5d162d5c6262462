"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from mallconsole.api.v1 import auth, health, offers, pages, products, shops

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_v1_router.include_router(pages.router, prefix="/pages", tags=["pages"])
api_v1_router.include_router(shops.router, prefix="/shops", tags=["shops"])
api_v1_router.include_router(products.router, prefix="/products", tags=["products"])
api_v1_router.include_router(offers.router, prefix="/offers", tags=["offers"])
