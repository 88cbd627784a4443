"""Validation models for FoodData Central payloads."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

# FDC nutrient ids mapped to NutrientProfile fields. Other ids are ignored.
NUTRIENT_CODES: dict[int, str] = {
    1008: "calories",
    1003: "protein_g",
    1004: "fat_g",
    1005: "carbs_g",
    1079: "fiber_g",
    2000: "sugar_g",
    1093: "sodium_mg",
}

# Branded label panel keys, expressed per serving.
LABEL_NUTRIENT_KEYS: dict[str, str] = {
    "calories": "calories",
    "protein": "protein_g",
    "fat": "fat_g",
    "carbohydrates": "carbs_g",
    "fiber": "fiber_g",
    "sugars": "sugar_g",
    "sodium": "sodium_mg",
}


class FdcNutrientRef(BaseModel):
    """Nutrient definition nested in a detail response."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    name: str | None = None
    unitName: str | None = None


class FdcFoodNutrient(BaseModel):
    """Nutrient amount in either the detail or the search response shape."""

    model_config = ConfigDict(extra="ignore")

    nutrient: FdcNutrientRef | None = None
    nutrientId: int | None = None
    amount: float | None = None
    value: float | None = None

    @property
    def code(self) -> int | None:
        if self.nutrient is not None and self.nutrient.id is not None:
            return self.nutrient.id
        return self.nutrientId

    @property
    def quantity(self) -> float | None:
        return self.amount if self.amount is not None else self.value


class FdcLabelValue(BaseModel):
    """Single label panel value."""

    model_config = ConfigDict(extra="ignore")

    value: float | None = Field(default=None, ge=0)


class FdcFoodPayload(BaseModel):
    """Food detail payload; only identifier and description are required."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    fdcId: int = Field(gt=0)
    description: str = Field(min_length=1)
    brandOwner: str | None = None
    brandName: str | None = None
    dataType: str | None = None
    gtinUpc: str | None = None
    servingSize: float | None = Field(default=None, gt=0)
    servingSizeUnit: str | None = None
    foodNutrients: list[FdcFoodNutrient] = Field(default_factory=list)
    labelNutrients: dict[str, FdcLabelValue | None] | None = None

    @model_validator(mode="after")
    def _mapped_nutrients_non_negative(self) -> "FdcFoodPayload":
        for nutrient in self.foodNutrients:
            amount = nutrient.quantity
            if nutrient.code in NUTRIENT_CODES and amount is not None and amount < 0:
                raise ValueError(
                    f"nutrient {nutrient.code} has negative amount {amount}"
                )
        return self


class FdcSearchPayload(BaseModel):
    """Search response payload."""

    model_config = ConfigDict(extra="ignore")

    foods: list[FdcFoodPayload] = Field(default_factory=list)
