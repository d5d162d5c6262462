"""Side-by-side product comparison panel."""

from typing import List

from mallconsole.schemas.product import Product
from mallconsole.state.context import AppContext
from mallconsole.views.common import empty_block, esc, money


def _feature(label: str, value: str) -> str:
    return (
        '<div class="compare-feature">'
        f'<span class="compare-feature-label">{label}:</span>'
        f'<span class="compare-feature-value">{value}</span></div>'
    )


def render_compare(ctx: AppContext, products: List[Product]) -> str:
    """One column per product: shop, price, brand, category, stock, then
    features and description when present."""
    if not products:
        return f'<div id="compareProductsContainer">{empty_block("No products to compare")}</div>'

    columns = []
    for p in products:
        parts = [
            f"<h4>{esc(p.name)}</h4>",
            _feature("Shop", esc(ctx.shop_name_for(p), "-")),
            _feature("Price", money(p.price)),
            _feature("Brand", esc(p.brand, "-")),
            _feature("Category", esc(p.category, "-")),
            _feature("In Stock", "Yes" if p.in_stock else "No"),
        ]
        if p.features:
            parts.append(_feature("Features", esc(", ".join(p.features))))
        if p.description:
            parts.append(_feature("Description", esc(p.description)))
        columns.append(f'<div class="compare-product">{"".join(parts)}</div>')

    return f'<div id="compareProductsContainer">{"".join(columns)}</div>'
