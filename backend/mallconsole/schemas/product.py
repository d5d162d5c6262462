"""Product Pydantic schemas."""

from typing import Any, List, Optional, Union

from pydantic import Field, field_validator

from mallconsole.schemas.base import DocumentModel, FormModel


class Product(DocumentModel):
    """Product document as stored in the ``products`` collection.

    ``shop_name`` is a snapshot of the shop's name at write time.
    """

    name: str = ""
    description: str = ""
    shop_id: str = ""
    shop_name: str = ""
    category: str = ""
    price: float = 0.0
    brand: str = ""
    features: List[str] = Field(default_factory=list)
    image_url: str = ""
    in_stock: bool = True


class ProductForm(FormModel):
    """Product create/edit form data.

    ``price`` is kept as entered; the product service coerces it.
    ``features`` also accepts the comma-separated text of the form field.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    shop_id: Optional[str] = None
    shop_name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Union[float, str]] = None
    brand: Optional[str] = None
    features: Optional[List[str]] = None
    image_url: Optional[str] = None
    in_stock: Optional[bool] = None

    @field_validator("features", mode="before")
    @classmethod
    def split_features(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [f.strip() for f in value.split(",") if f.strip()]
        return value

    @classmethod
    def from_product(cls, product: Product) -> "ProductForm":
        return cls(
            name=product.name,
            description=product.description,
            shop_id=product.shop_id,
            shop_name=product.shop_name,
            category=product.category,
            price=product.price,
            brand=product.brand,
            features=list(product.features),
            image_url=product.image_url,
            in_stock=product.in_stock,
        )
