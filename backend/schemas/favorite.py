from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List


# Request schema for marking a product as favorite
class FavoriteAdd(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId", min_length=1)

    @field_validator("product_id")
    @classmethod
    def strip_product_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("productId must not be blank")
        return v


# All favorited product ids of the caller, most recent first
class FavoritesOut(BaseModel):
    favorites: List[str]


class MessageOut(BaseModel):
    message: str
