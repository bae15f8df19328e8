import json

import httpx
import pytest

from domain.models import RecipeGenerationRequest
from domain.recipe_api import RecipeApi, recipe_api_client_factory

from conftest import BASE_URL, RecipeService


@pytest.mark.asyncio
async def test_endpoints(service: RecipeService, api: RecipeApi) -> None:
    await api.nutrition_profile()
    await api.generate(RecipeGenerationRequest(ingredients=("tofu",), max_prep_time=20))
    await api.save(42)

    profile, generate, save = service.requests
    assert (profile.method, str(profile.url)) == (
        "GET",
        f"{BASE_URL}api/nutrition/profile",
    )
    assert (generate.method, generate.url.path) == ("POST", "/api/recipes/generate")
    body = json.loads(generate.content)
    assert body["ingredients"] == ["tofu"]
    assert body["maxPrepTime"] == 20
    assert body["useNutritionProfile"] is True
    assert (save.method, save.url.path) == ("POST", "/api/recipes/save")
    assert json.loads(save.content) == {"recipeId": 42}


@pytest.mark.asyncio
async def test_responses_returned_as_is(service: RecipeService, api: RecipeApi) -> None:
    service.generated = (500, {"error": "model unavailable"})
    resp = await api.generate(RecipeGenerationRequest())
    assert resp.status_code == 500
    assert resp.json() == {"error": "model unavailable"}


@pytest.mark.asyncio
async def test_session_cookies_forwarded(service: RecipeService) -> None:
    client = recipe_api_client_factory(
        BASE_URL, cookies={"session": "abc"}, transport=service.transport()
    )
    api = RecipeApi(client)
    await api.nutrition_profile()
    await api.close()

    (sent,) = service.requests
    assert sent.headers["cookie"] == "session=abc"
    assert client.is_closed


@pytest.mark.asyncio
async def test_transport_errors_propagate(service: RecipeService, api: RecipeApi) -> None:
    service.saved = httpx.ConnectError("Connection refused")
    with pytest.raises(httpx.ConnectError):
        await api.save(1)
