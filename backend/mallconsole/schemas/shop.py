"""Shop Pydantic schemas."""

from typing import Optional

from mallconsole.schemas.base import DocumentModel, FormModel


class Shop(DocumentModel):
    """Shop document as stored in the ``shops`` collection."""

    name: str = ""
    description: str = ""
    floor: str = ""
    category: str = ""
    location: str = ""
    contact: str = ""
    email: str = ""
    opening_hours: str = ""


class ShopForm(FormModel):
    """Shop create/edit form data."""

    name: Optional[str] = None
    description: Optional[str] = None
    floor: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    opening_hours: Optional[str] = None

    @classmethod
    def from_shop(cls, shop: Shop) -> "ShopForm":
        return cls(
            name=shop.name,
            description=shop.description,
            floor=shop.floor,
            category=shop.category,
            location=shop.location,
            contact=shop.contact,
            email=shop.email,
            opening_hours=shop.opening_hours,
        )
