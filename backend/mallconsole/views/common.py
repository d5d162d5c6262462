"""Markup helpers shared by the page renderers."""

from datetime import datetime
from html import escape
from typing import Any, Iterable, Optional


def esc(value: Any, default: str = "") -> str:
    """Escape free text for HTML; empty values render as ``default``."""
    if value is None or value == "":
        return escape(default)
    return escape(str(value))


def money(value: Optional[float]) -> str:
    return f"${(value or 0):.2f}"


def format_date(value: Optional[datetime]) -> str:
    """'Mar 5, 2025' style date, '' when absent."""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def date_input(value: Optional[datetime]) -> str:
    """YYYY-MM-DD for date inputs, '' when absent."""
    return value.strftime("%Y-%m-%d") if value else ""


def options(values: Iterable[str], selected: str = "", all_label: Optional[str] = None) -> str:
    """``<option>`` list, with an optional leading empty "All ..." entry."""
    parts = []
    if all_label is not None:
        parts.append(f'<option value="">{esc(all_label)}</option>')
    for value in values:
        mark = " selected" if value == selected else ""
        parts.append(f'<option value="{esc(value)}"{mark}>{esc(value)}</option>')
    return "".join(parts)


def empty_row(colspan: int, message: str) -> str:
    return f'<tr><td colspan="{colspan}" class="text-center">{esc(message)}</td></tr>'


def empty_block(message: str) -> str:
    return f'<p class="text-center">{esc(message)}</p>'


def action_buttons(kind: str, doc_id: str, is_admin: bool) -> str:
    """View button for everyone; Edit and Delete only for admins."""
    doc = esc(doc_id)
    html = f'<button class="btn btn-sm btn-secondary" data-action="view-{kind}" data-id="{doc}">View</button>'
    if is_admin:
        html += (
            f'<button class="btn btn-sm btn-primary" data-action="edit-{kind}" data-id="{doc}">Edit</button>'
            f'<button class="btn btn-sm btn-danger" data-action="delete-{kind}" data-id="{doc}">Delete</button>'
        )
    return html
