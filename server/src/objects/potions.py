from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Ratings(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    strength: Optional[float] = None
    flavor: Optional[float] = None
    duration: Optional[float] = None
    sideEffects: Optional[float] = None


class Potion(BaseModel):
    """Potion payload as accepted on create and full overwrite.

    ``categories`` is accepted as an input spelling of ``category``; the record
    is always stored and returned under ``category``. Numbers must be finite.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, allow_inf_nan=False)

    name: str = Field(..., min_length=1)
    vendor_id: Optional[str] = None
    category: Optional[str] = Field(default=None, validation_alias=AliasChoices("category", "categories"))
    price: Optional[float] = None
    score: Optional[float] = None
    ingredients: Optional[list[str]] = None
    ratings: Optional[Ratings] = None

    @field_validator("ingredients")
    @classmethod
    def _drop_blank_ingredients(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        return [item for item in value if item]

    def to_doc(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
