# api/v1/schemas/product.py
import base64
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from app.domain.models.product import Product

# at least one non-whitespace character
NON_BLANK = r"^\s*\S"


def _b64_to_bytes(v):
    # JSON carries binary as base64 text
    if isinstance(v, str):
        try:
            return base64.b64decode(v, validate=True)
        except ValueError:
            raise ValueError("image must be base64 encoded") from None
    return v


ImageBytes = Annotated[
    bytes,
    BeforeValidator(_b64_to_bytes),
    PlainSerializer(lambda b: base64.b64encode(b).decode("ascii"), return_type=str, when_used="json"),
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductIn(_CamelModel):
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[ImageBytes] = None
    image_content_type: Optional[str] = None
    image_base64: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    def to_domain(self) -> Product:
        return Product(**self.model_dump())


class ProductOut(_CamelModel):
    id: str
    name: str
    price: float
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[ImageBytes] = None
    image_content_type: Optional[str] = None

    @classmethod
    def from_domain(cls, product: Product) -> "ProductOut":
        return cls(**product.model_dump())
