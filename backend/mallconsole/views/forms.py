"""Create/edit form modals."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Tuple

from mallconsole.schemas.base import FormModel
from mallconsole.views.common import date_input, esc

# (attribute, label, input type)
SHOP_FIELDS = (
    ("name", "Name", "text"),
    ("description", "Description", "textarea"),
    ("floor", "Floor", "text"),
    ("category", "Category", "text"),
    ("location", "Location", "text"),
    ("contact", "Contact", "text"),
    ("email", "Email", "email"),
    ("opening_hours", "Opening Hours", "text"),
)

PRODUCT_FIELDS = (
    ("name", "Name", "text"),
    ("description", "Description", "textarea"),
    ("shop_id", "Shop", "shop"),
    ("category", "Category", "text"),
    ("price", "Price", "number"),
    ("brand", "Brand", "text"),
    ("features", "Features (comma separated)", "text"),
    ("image_url", "Image URL", "url"),
    ("in_stock", "In Stock", "checkbox"),
)

OFFER_FIELDS = (
    ("title", "Title", "text"),
    ("description", "Description", "textarea"),
    ("shop_id", "Shop", "shop"),
    ("discount", "Discount", "number"),
    ("discount_type", "Discount Type", "discount_type"),
    ("valid_from", "Valid From", "date"),
    ("valid_until", "Valid Until", "date"),
    ("terms", "Terms", "textarea"),
    ("is_active", "Active", "checkbox"),
)

FORM_FIELDS = {"shop": SHOP_FIELDS, "product": PRODUCT_FIELDS, "offer": OFFER_FIELDS}


@dataclass
class FormState:
    """An open modal: what it edits and the values it starts from.

    ``doc_id`` is None when creating.
    """

    kind: str
    title: str
    form: FormModel
    doc_id: str | None = None
    shop_options: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def is_edit(self) -> bool:
        return self.doc_id is not None


def _text_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(value)
    if isinstance(value, datetime):
        return date_input(value)
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _input(state: FormState, name: str, label: str, kind: str) -> str:
    value = getattr(state.form, name)
    input_id = f"{state.kind}-{name}"
    label_html = f'<label for="{input_id}">{esc(label)}</label>'

    if kind == "checkbox":
        checked = " checked" if value is not False else ""
        return f'<div class="form-group"><input type="checkbox" id="{input_id}" name="{name}"{checked}>{label_html}</div>'
    if kind == "textarea":
        control = f'<textarea id="{input_id}" name="{name}">{esc(_text_value(value))}</textarea>'
    elif kind == "shop":
        opts = ['<option value="">Select Shop</option>']
        for shop_id, shop_name in state.shop_options:
            mark = " selected" if shop_id == value else ""
            opts.append(f'<option value="{esc(shop_id)}"{mark}>{esc(shop_name)}</option>')
        control = f'<select id="{input_id}" name="{name}">{"".join(opts)}</select>'
    elif kind == "discount_type":
        current = value or "percentage"
        opts = "".join(
            f'<option value="{v}"{" selected" if v == current else ""}>{text}</option>'
            for v, text in (("percentage", "Percentage"), ("fixed", "Fixed Amount"))
        )
        control = f'<select id="{input_id}" name="{name}">{opts}</select>'
    else:
        control = f'<input type="{kind}" id="{input_id}" name="{name}" value="{esc(_text_value(value))}">'
    return f'<div class="form-group">{label_html}{control}</div>'


def render_form_modal(state: FormState) -> str:
    fields = "".join(_input(state, *field_def) for field_def in FORM_FIELDS[state.kind])
    doc_id = esc(state.doc_id or "")
    return (
        f'<div class="modal active" id="{state.kind}Modal">'
        f'<h3 id="{state.kind}ModalTitle">{esc(state.title)}</h3>'
        f'<form id="{state.kind}Form" data-id="{doc_id}">{fields}'
        '<button type="submit" class="btn btn-primary">Save</button></form></div>'
    )
