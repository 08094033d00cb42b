from pydantic import BaseModel, Field
from typing import Optional

# Used when a base64 image arrives without a content type
DEFAULT_IMAGE_CONTENT_TYPE = "image/*"
# Served by the image endpoint when the stored content type is missing
FALLBACK_IMAGE_MEDIA_TYPE = "application/octet-stream"


class Product(BaseModel):
    id: Optional[str] = None
    name: str
    price: float
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[bytes] = None
    image_content_type: Optional[str] = None
    # input-only, decoded into `image` before the product is stored
    image_base64: Optional[str] = Field(default=None, exclude=True)

    @property
    def has_image(self) -> bool:
        return bool(self.image)
