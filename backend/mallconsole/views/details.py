"""Plain-text detail summaries shown by the "View" actions."""

from mallconsole.schemas.offer import Offer
from mallconsole.schemas.product import Product
from mallconsole.schemas.shop import Shop
from mallconsole.state.context import AppContext
from mallconsole.views.common import money


def describe_shop(shop: Shop) -> str:
    return "\n".join([
        f"Shop: {shop.name}",
        f"Floor: {shop.floor}",
        f"Category: {shop.category}",
        f"Location: {shop.location or 'N/A'}",
        f"Contact: {shop.contact or 'N/A'}",
        f"Description: {shop.description or 'N/A'}",
    ])


def describe_product(ctx: AppContext, product: Product) -> str:
    return "\n".join([
        f"Product: {product.name}",
        f"Shop: {ctx.shop_name_for(product) or 'N/A'}",
        f"Price: {money(product.price)}",
        f"Brand: {product.brand or 'N/A'}",
        f"Category: {product.category or 'N/A'}",
        f"Description: {product.description or 'N/A'}",
    ])


def describe_offer(ctx: AppContext, offer: Offer) -> str:
    return "\n".join([
        f"Offer: {offer.title}",
        f"Shop: {ctx.shop_name_for(offer) or 'N/A'}",
        f"Discount: {offer.discount_label}",
        f"Description: {offer.description or 'N/A'}",
        f"Terms: {offer.terms or 'N/A'}",
    ])
