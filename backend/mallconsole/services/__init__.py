"""Services module for console business logic.

Resource services wrap one document collection each; the identity gateway
wraps the identity provider and the role side records. All of them return a
``ServiceResult`` instead of raising.
"""

from mallconsole.services.identity_gateway import IdentityGateway
from mallconsole.services.offer_service import OfferService
from mallconsole.services.product_service import ProductService
from mallconsole.services.resource_service import ResourceService
from mallconsole.services.shop_service import ShopService

__all__ = [
    "IdentityGateway",
    "OfferService",
    "ProductService",
    "ResourceService",
    "ShopService",
]
