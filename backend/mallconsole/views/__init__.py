"""HTML renderers for the console pages, panels and modals."""

from mallconsole.views.auth import render_login
from mallconsole.views.compare import render_compare
from mallconsole.views.filters import OfferFilters, ProductFilters, ShopFilters, ViewFilters
from mallconsole.views.forms import FormState, render_form_modal
from mallconsole.views.pages import PAGES, render_page

__all__ = [
    "PAGES",
    "FormState",
    "OfferFilters",
    "ProductFilters",
    "ShopFilters",
    "ViewFilters",
    "render_compare",
    "render_form_modal",
    "render_login",
    "render_page",
]
