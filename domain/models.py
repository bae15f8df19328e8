from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class GenerationStage(Enum):
    initializing = "initializing"
    generating = "generating"
    validating = "validating"
    complete = "complete"


class NutritionProfile:
    """Whatever the profile endpoint returns. Only its presence matters here."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.data = data

    def __repr__(self) -> str:
        return f"<NutritionProfile(keys={sorted(self.data)})>"

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


class Recipe:
    def __init__(
        self,
        *,
        id: int,
        name: str,
        description: str = "",
        ingredients: list[str] | None = None,
        instructions: list[str] | None = None,
        prep_time: int | None = None,
        calories: int | None = None,
        is_saved: bool = False,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.id = id
        self.name = name
        self.description = description
        self.ingredients = [] if ingredients is None else ingredients
        self.instructions = [] if instructions is None else instructions
        self.prep_time = prep_time
        self.calories = calories
        self.is_saved = is_saved
        self.extra = {} if extra is None else extra

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name={self.name}, is_saved={self.is_saved})>"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipe":
        known = {
            "id",
            "name",
            "title",
            "description",
            "ingredients",
            "instructions",
            "prepTime",
            "calories",
            "isSaved",
        }
        return cls(
            id=int(data["id"]),
            name=data.get("name") or data.get("title") or "",
            description=data.get("description") or "",
            ingredients=[str(i) for i in data.get("ingredients") or []],
            instructions=[str(i) for i in data.get("instructions") or []],
            prep_time=data.get("prepTime"),
            calories=data.get("calories"),
            is_saved=bool(data.get("isSaved", False)),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "ingredients": self.ingredients,
            "instructions": self.instructions,
            "prepTime": self.prep_time,
            "calories": self.calories,
            "isSaved": self.is_saved,
        }


def _split_list(value: Any) -> Any:
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


class RecipeGenerationRequest(BaseModel):
    """Parameters for one generation attempt.

    Doubles as the schema for the generate form, so string inputs such as a
    comma separated ingredient list are coerced here. Sent to the API as
    camelCase JSON.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    meal_type: str = "dinner"
    cuisine: str | None = None
    ingredients: tuple[str, ...] = ()
    excluded_ingredients: tuple[str, ...] = ()
    max_prep_time: int | None = None
    servings: int = 2
    use_nutrition_profile: bool = True
    notes: str | None = None

    @field_validator("ingredients", "excluded_ingredients", mode="before")
    @classmethod
    def split_comma_separated(cls, value: Any) -> Any:
        return _split_list(value)

    @field_validator("cuisine", "notes", "max_prep_time", mode="before")
    @classmethod
    def blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("servings")
    @classmethod
    def positive_servings(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Servings must be at least 1")
        return value

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class SaveRecipeForm(BaseModel):
    recipe_id: int


class User:
    def __init__(self, *, id: int, email: str, name: str | None = None) -> None:
        self.id = id
        self.email = email
        self.name = name

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
