from typing import Protocol


LOGIN = "/login"
RECIPES = "/dashboard/recipes"
GENERATE = "/dashboard/recipes/generate"
NUTRITION_SETTINGS = "/dashboard/settings/nutrition"


def recipe_detail(recipe_id: int) -> str:
    return f"{RECIPES}/{recipe_id}"


class Navigator(Protocol):
    def push(self, url: str) -> None:
        ...


class RedirectNavigator:
    """Remembers where the workflow wants to go until the web layer asks."""

    def __init__(self) -> None:
        self._location: str | None = None

    @property
    def location(self) -> str | None:
        return self._location

    def push(self, url: str) -> None:
        self._location = url

    def pop(self) -> str | None:
        location, self._location = self._location, None
        return location
