import asyncio
from typing import Any, TypeAlias

import httpx
import pytest

from domain.models import GenerationStage, RecipeGenerationRequest
from domain.navigation import RedirectNavigator
from domain.progress import StageSimulator
from domain.recipe_api import RecipeApi, recipe_api_client_factory
from domain.workflow import GenerationWorkflow


BASE_URL = "http://recipes.test/"

RECIPE: dict[str, Any] = {
    "id": 42,
    "name": "Lemon chicken traybake",
    "description": "Bright and **zesty**.",
    "ingredients": ["Chicken thighs (4)", "Lemon (1)"],
    "instructions": ["Heat the oven.", "Roast for 40 mins."],
    "prepTime": 50,
    "calories": 520,
    "isSaved": False,
    "cuisine": "mediterranean",
}

PROFILE: dict[str, Any] = {"dailyCalories": 2200, "dietType": "balanced"}


Reply: TypeAlias = tuple[int, Any] | Exception


class RecipeService:
    """Stand-in for the recipe api. Set a reply per endpoint."""

    def __init__(self) -> None:
        self.profile: Reply = (404, {"error": "Profile not found"})
        self.generated: Reply = (200, {"recipe": RECIPE})
        self.saved: Reply = (200, {"success": True})
        self.requests: list[httpx.Request] = []

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        match request.url.path:
            case "/api/nutrition/profile":
                reply = self.profile
            case "/api/recipes/generate":
                reply = self.generated
            case "/api/recipes/save":
                reply = self.saved
            case _:
                return httpx.Response(404)
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class RecordingSleep:
    """Records delays and the stage shown at the time instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []
        self.stages: list[GenerationStage] = []
        self.workflow: GenerationWorkflow | None = None

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.workflow is not None:
            self.stages.append(self.workflow.stage)
        await asyncio.sleep(0)


@pytest.fixture
def service() -> RecipeService:
    return RecipeService()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def api(service: RecipeService) -> RecipeApi:
    client = recipe_api_client_factory(BASE_URL, transport=service.transport())
    return RecipeApi(client)


@pytest.fixture
def workflow(api: RecipeApi, sleep: RecordingSleep) -> GenerationWorkflow:
    workflow = GenerationWorkflow(
        api,
        navigator=RedirectNavigator(),
        simulator=StageSimulator(sleep=sleep),
    )
    sleep.workflow = workflow
    return workflow


@pytest.fixture
def generation_request() -> RecipeGenerationRequest:
    return RecipeGenerationRequest(
        meal_type="dinner",
        cuisine="mediterranean",
        ingredients=("chicken", "lemon"),
        servings=4,
    )


class FakeDatabase:
    def __init__(self, rows: dict[int, dict[str, Any]] | None = None) -> None:
        self.rows = {} if rows is None else rows
        self.queries: list[tuple[str, dict[str, Any]]] = []
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def fetch_one(self, query: str, values: dict[str, Any]) -> dict[str, Any] | None:
        self.queries.append((query, values))
        return self.rows.get(values["id"])
