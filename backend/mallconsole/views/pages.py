"""Page renderers.

Every renderer is a pure function of the context (and filter parameters)
returning an HTML fragment. Free text is always escaped; edit and delete
controls only appear for admins; an empty list renders an explicit empty
state. Renderers never modify the context.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional

from mallconsole.state.context import AppContext
from mallconsole.views.common import (
    action_buttons,
    empty_block,
    empty_row,
    esc,
    format_date,
    money,
    options,
)
from mallconsole.views.filters import ViewFilters

PAGES = ("dashboard", "shops", "products", "offers", "categories", "floors", "reports", "settings")
ADMIN_PAGES = ("categories", "floors", "reports")

RECENT_SHOPS = 5


def page_title(page: str) -> str:
    return page[:1].upper() + page[1:]


def render_nav(ctx: AppContext) -> str:
    """Sidebar navigation; categories, floors and reports are admin-only."""
    items = []
    for page in PAGES:
        if page in ADMIN_PAGES and not ctx.is_admin:
            continue
        active = ' class="active"' if page == ctx.current_page else ""
        items.append(f'<li data-page="{page}"{active}>{page_title(page)}</li>')
    return f'<nav class="sidebar"><ul>{"".join(items)}</ul></nav>'


def _add_button(kind: str, label: str, ctx: AppContext) -> str:
    if not ctx.is_admin:
        return ""
    return f'<button class="btn btn-primary" data-action="add-{kind}">{esc(label)}</button>'


# ----------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------


def render_dashboard(ctx: AppContext, filters: ViewFilters, now: Optional[datetime] = None) -> str:
    active_offers = [o for o in ctx.offers if o.is_currently_active(now)]
    stats = (
        ("totalShops", "Total Shops", len(ctx.shops)),
        ("totalProducts", "Total Products", len(ctx.products)),
        ("totalOffers", "Active Offers", len(active_offers)),
        ("totalCategories", "Categories", len(ctx.categories)),
    )
    cards = "".join(
        f'<div class="stat-card" id="{key}"><span class="stat-value">{value}</span>'
        f'<span class="stat-label">{label}</span></div>'
        for key, label, value in stats
    )

    recent = ctx.shops[:RECENT_SHOPS]
    if recent:
        rows = "".join(
            f"<tr><td>{esc(s.name)}</td><td>{esc(s.floor)}</td><td>{esc(s.category)}</td></tr>"
            for s in recent
        )
        table = (
            '<table class="data-table"><thead><tr><th>Name</th><th>Floor</th>'
            f"<th>Category</th></tr></thead><tbody>{rows}</tbody></table>"
        )
    else:
        table = empty_block("No shops available")

    return (
        f'<section id="dashboardPage"><div class="stats">{cards}</div>'
        f'<div id="recentShops"><h3>Recent Shops</h3>{table}</div></section>'
    )


# ----------------------------------------------------------------------
# Shops
# ----------------------------------------------------------------------


def render_shop_filters(ctx: AppContext, filters: ViewFilters) -> str:
    f = filters.shops
    return (
        '<div class="filters">'
        f'<select name="floor" id="shopFilterFloor">{options(ctx.floors, f.floor, "All Floors")}</select>'
        f'<select name="category" id="shopFilterCategory">{options(ctx.categories, f.category, "All Categories")}</select>'
        "</div>"
    )


def render_shops(ctx: AppContext, filters: ViewFilters, now: Optional[datetime] = None) -> str:
    shops = filters.shops.apply(ctx.shops)

    if shops:
        rows = "".join(
            "<tr>"
            f"<td>{esc(s.name)}</td>"
            f"<td>{esc(s.floor)}</td>"
            f"<td>{esc(s.category)}</td>"
            f"<td>{esc(s.location, '-')}</td>"
            f"<td>{esc(s.contact, '-')}</td>"
            f"<td>{action_buttons('shop', s.id, ctx.is_admin)}</td>"
            "</tr>"
            for s in shops
        )
    else:
        rows = empty_row(6, "No shops found")

    return (
        '<section id="shopsPage">'
        f'{_add_button("shop", "Add Shop", ctx)}{render_shop_filters(ctx, filters)}'
        '<table class="data-table"><thead><tr><th>Name</th><th>Floor</th><th>Category</th>'
        "<th>Location</th><th>Contact</th><th>Actions</th></tr></thead>"
        f'<tbody id="shopsTableBody">{rows}</tbody></table></section>'
    )


# ----------------------------------------------------------------------
# Products
# ----------------------------------------------------------------------


def render_product_filters(ctx: AppContext, filters: ViewFilters) -> str:
    f = filters.products
    low = "" if f.min_price is None else f"{f.min_price:g}"
    high = "" if f.max_price is None else f"{f.max_price:g}"
    return (
        '<div class="filters">'
        f'<select name="category" id="productFilterCategory">{options(ctx.categories, f.category, "All Categories")}</select>'
        f'<input type="number" name="min_price" id="productFilterMinPrice" value="{low}">'
        f'<input type="number" name="max_price" id="productFilterMaxPrice" value="{high}">'
        "</div>"
    )


def render_products(ctx: AppContext, filters: ViewFilters, now: Optional[datetime] = None) -> str:
    products = filters.products.apply(ctx.products)

    if products:
        rows = []
        for p in products:
            checked = " checked" if ctx.is_selected(p.id) else ""
            stock = (
                '<span class="badge-success">In Stock</span>'
                if p.in_stock
                else '<span class="badge-danger">Out of Stock</span>'
            )
            rows.append(
                "<tr>"
                f'<td><input type="checkbox" data-action="select-product" data-id="{esc(p.id)}"{checked}></td>'
                f"<td>{esc(p.name)}</td>"
                f"<td>{esc(ctx.shop_name_for(p), '-')}</td>"
                f"<td>{esc(p.category, '-')}</td>"
                f"<td>{money(p.price)}</td>"
                f"<td>{esc(p.brand, '-')}</td>"
                f"<td>{stock}</td>"
                f"<td>{action_buttons('product', p.id, ctx.is_admin)}</td>"
                "</tr>"
            )
        body = "".join(rows)
    else:
        body = empty_row(8, "No products found")

    all_checked = " checked" if ctx.all_selected else ""
    return (
        '<section id="productsPage">'
        f'{_add_button("product", "Add Product", ctx)}'
        '<button class="btn btn-secondary" data-action="compare-products">Compare</button>'
        f"{render_product_filters(ctx, filters)}"
        '<table class="data-table"><thead><tr>'
        f'<th><input type="checkbox" id="selectAllProducts"{all_checked}></th>'
        "<th>Name</th><th>Shop</th><th>Category</th><th>Price</th><th>Brand</th>"
        "<th>Stock</th><th>Actions</th></tr></thead>"
        f'<tbody id="productsTableBody">{body}</tbody></table></section>'
    )


# ----------------------------------------------------------------------
# Offers
# ----------------------------------------------------------------------


def render_offers(ctx: AppContext, filters: ViewFilters, now: Optional[datetime] = None) -> str:
    offers = filters.offers.apply(ctx.offers, now)
    checked = " checked" if filters.offers.active_only else ""
    toggle = (
        '<label class="filters"><input type="checkbox" name="active_only" '
        f'id="offerFilterActive"{checked}> Active only</label>'
    )

    if not offers:
        grid = empty_block("No offers available")
    else:
        cards = []
        for o in offers:
            until = (
                f"<p><small>Valid until: {esc(format_date(o.valid_until))}</small></p>"
                if o.valid_until
                else ""
            )
            cards.append(
                '<div class="card"><div class="card-header"><div>'
                f'<div class="card-title">{esc(o.title)}</div>'
                f'<div class="card-subtitle">{esc(ctx.shop_name_for(o), "N/A")}</div></div>'
                f'<span class="badge-success">{esc(o.discount_label)}</span></div>'
                f'<div class="card-body"><p>{esc(o.description, "No description")}</p>{until}</div>'
                f'<div class="card-footer">{action_buttons("offer", o.id, ctx.is_admin)}</div></div>'
            )
        grid = "".join(cards)

    return (
        f'<section id="offersPage">{_add_button("offer", "Add Offer", ctx)}{toggle}'
        f'<div id="offersGrid" class="grid">{grid}</div></section>'
    )


# ----------------------------------------------------------------------
# Categories, floors, reports
# ----------------------------------------------------------------------


def render_categories(ctx: AppContext, filters: ViewFilters, now: Optional[datetime] = None) -> str:
    if not ctx.categories:
        grid = empty_block("No categories available")
    else:
        grid = "".join(
            '<div class="card"><div class="card-header">'
            f'<div class="card-title">{esc(c)}</div></div><div class="card-body">'
            f"<p>Shops: {sum(1 for s in ctx.shops if s.category == c)}</p>"
            f"<p>Products: {sum(1 for p in ctx.products if p.category == c)}</p>"
            "</div></div>"
            for c in ctx.categories
        )
    return f'<section id="categoriesPage"><div id="categoriesGrid" class="grid">{grid}</div></section>'


def render_floors(ctx: AppContext, filters: ViewFilters, now: Optional[datetime] = None) -> str:
    if not ctx.floors:
        grid = empty_block("No floors available")
    else:
        grid = "".join(
            '<div class="card"><div class="card-header">'
            f'<div class="card-title">{esc(fl)}</div></div><div class="card-body">'
            f"<p>Shops: {sum(1 for s in ctx.shops if s.floor == fl)}</p>"
            "</div></div>"
            for fl in ctx.floors
        )
    return f'<section id="floorsPage"><div id="floorsGrid" class="grid">{grid}</div></section>'


def price_summary(prices: List[float]) -> Optional[Dict[str, float]]:
    """Min, max and average over positive prices; None when there are none."""
    positive = [p for p in prices if p and p > 0]
    if not positive:
        return None
    return {
        "min": min(positive),
        "max": max(positive),
        "avg": sum(positive) / len(positive),
        "count": len(positive),
    }


def render_reports(ctx: AppContext, filters: ViewFilters, now: Optional[datetime] = None) -> str:
    floor_items = "".join(
        f"<li>{esc(fl)}: {sum(1 for s in ctx.shops if s.floor == fl)} shops</li>" for fl in ctx.floors
    )
    category_items = "".join(
        f"<li>{esc(c)}: {sum(1 for s in ctx.shops if s.category == c)} shops</li>" for c in ctx.categories
    )

    summary = price_summary([p.price for p in ctx.products])
    if summary:
        prices = (
            f"<p>Min Price: {money(summary['min'])}</p>"
            f"<p>Max Price: {money(summary['max'])}</p>"
            f"<p>Average Price: {money(summary['avg'])}</p>"
            f"<p>Total Products: {summary['count']}</p>"
        )
    else:
        prices = "<p>No price data available</p>"

    return (
        '<section id="reportsPage">'
        f'<div id="floorDistributionChart"><ul>{floor_items}</ul></div>'
        f'<div id="categoryDistributionChart"><ul>{category_items}</ul></div>'
        f'<div id="priceAnalysisChart">{prices}</div>'
        "</section>"
    )


def render_settings(ctx: AppContext, filters: ViewFilters, now: Optional[datetime] = None) -> str:
    email = ctx.identity.email if ctx.identity else ""
    return (
        '<section id="settingsPage">'
        f'<p>Signed in as: <span id="userEmail">{esc(email, "-")}</span></p>'
        f'<p>Role: <span id="userRole">{esc(ctx.role, "-")}</span></p>'
        '<button class="btn btn-danger" data-action="logout">Logout</button>'
        "</section>"
    )


PAGE_RENDERERS: Dict[str, Callable[..., str]] = {
    "dashboard": render_dashboard,
    "shops": render_shops,
    "products": render_products,
    "offers": render_offers,
    "categories": render_categories,
    "floors": render_floors,
    "reports": render_reports,
    "settings": render_settings,
}


def render_page(ctx: AppContext, filters: ViewFilters, now: Optional[datetime] = None) -> str:
    """Render the context's current page inside the console layout."""
    body = PAGE_RENDERERS[ctx.current_page](ctx, filters, now)
    return (
        f'<div class="app">{render_nav(ctx)}<main>'
        f'<h1 id="pageTitle">{page_title(ctx.current_page)}</h1>{body}</main></div>'
    )
