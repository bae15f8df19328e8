"""Client for the recipe HTTP API the generate page talks to."""

from typing import Any

import httpx

from domain.models import RecipeGenerationRequest


TIMEOUT = 60 * 2

PROFILE_PATH = "api/nutrition/profile"
GENERATE_PATH = "api/recipes/generate"
SAVE_PATH = "api/recipes/save"


def recipe_api_client_factory(
    base_url: str,
    *,
    cookies: dict[str, str] | None = None,
    timeout: float = TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        headers={"Content-Type": "application/json"},
        cookies=cookies,
        timeout=timeout,
        transport=transport,
    )


class RecipeApi:
    """Thin wrapper over the three endpoints.

    Responses are returned as they are; deciding what a status code means is
    left to the workflow.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def nutrition_profile(self) -> httpx.Response:
        return await self._client.get(PROFILE_PATH)

    async def generate(self, request: RecipeGenerationRequest) -> httpx.Response:
        return await self._client.post(GENERATE_PATH, json=request.to_json())

    async def save(self, recipe_id: int) -> httpx.Response:
        payload: dict[str, Any] = {"recipeId": recipe_id}
        return await self._client.post(SAVE_PATH, json=payload)

    async def close(self) -> None:
        await self._client.aclose()
