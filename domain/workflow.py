"""The generate page's state machine.

A workflow belongs to one visitor. It loads their nutrition profile once,
then runs generation attempts one at a time: fake progress stages run next
to the real request and the outcome is only looked at once both are done.
"""

import asyncio
import contextlib
from enum import Enum
import logging

import httpx

from domain import navigation
from domain.models import (
    GenerationStage,
    NutritionProfile,
    Recipe,
    RecipeGenerationRequest,
)
from domain.navigation import Navigator
from domain.progress import StageSimulator
from domain.recipe_api import RecipeApi


logger = logging.getLogger(__name__)


GENERATE_FAILED = "Failed to generate recipe"


class GenerationFailed(Exception):
    pass


class View(Enum):
    loading = "loading"
    progress = "progress"
    error = "error"
    recipe = "recipe"
    form = "form"


class GenerationWorkflow:
    def __init__(
        self,
        api: RecipeApi,
        *,
        navigator: Navigator,
        simulator: StageSimulator | None = None,
    ) -> None:
        self.api = api
        self.navigator = navigator
        self.simulator = StageSimulator() if simulator is None else simulator

        self._profile: NutritionProfile | None = None
        self._profile_loading = True
        self._generating = False
        self._stage = GenerationStage.initializing
        self._recipe: Recipe | None = None
        self._error: str | None = None
        self._last_request: RecipeGenerationRequest | None = None
        self._task: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        return f"<GenerationWorkflow(view={self.view.value}, stage={self.stage.value})>"

    @property
    def profile(self) -> NutritionProfile | None:
        return self._profile

    @property
    def profile_loading(self) -> bool:
        return self._profile_loading

    @property
    def has_nutrition_profile(self) -> bool:
        return self._profile is not None

    @property
    def generating(self) -> bool:
        return self._generating

    @property
    def stage(self) -> GenerationStage:
        return self._stage

    @property
    def recipe(self) -> Recipe | None:
        return self._recipe

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def last_request(self) -> RecipeGenerationRequest | None:
        return self._last_request

    @property
    def view(self) -> View:
        if self._profile_loading:
            return View.loading
        if self._generating:
            return View.progress
        if self._error is not None:
            return View.error
        if self._recipe is not None:
            return View.recipe
        return View.form

    async def load_profile(self) -> None:
        try:
            resp = await self.api.nutrition_profile()
            if resp.is_success:
                self._profile = NutritionProfile(resp.json())
            elif resp.status_code == httpx.codes.UNAUTHORIZED:
                self.navigator.push(navigation.LOGIN)
                return
            elif resp.status_code != httpx.codes.NOT_FOUND:
                logger.warning(
                    "Unexpected status %s loading nutrition profile.",
                    resp.status_code,
                )
        except Exception as e:
            logger.error("Error loading nutrition profile: %r", e)
        self._profile_loading = False

    def _begin(self, request: RecipeGenerationRequest) -> bool:
        if self._generating:
            logger.warning("Generation already in progress, ignoring %r", request)
            return False
        self._generating = True
        self._error = None
        self._recipe = None
        self._last_request = request
        return True

    def _set_stage(self, stage: GenerationStage) -> None:
        self._stage = stage

    async def _attempt(self, request: RecipeGenerationRequest) -> None:
        try:
            _, resp = await asyncio.gather(
                self.simulator.run(self._set_stage),
                self.api.generate(request),
                return_exceptions=True,
            )
            if isinstance(resp, BaseException):
                raise resp
            self._recipe = read_recipe(resp)
        except Exception as e:
            logger.error("Recipe generation error: %r", e)
            self._error = str(e) or GENERATE_FAILED
        finally:
            self._generating = False
            self._stage = GenerationStage.initializing

    async def generate(self, request: RecipeGenerationRequest) -> None:
        if self._begin(request):
            await self._attempt(request)

    async def regenerate(self) -> None:
        if self._last_request is None:
            return
        await self.generate(self._last_request)

    def start_generation(
        self, request: RecipeGenerationRequest
    ) -> asyncio.Task[None] | None:
        """Start an attempt in the background. State changes before returning."""
        if not self._begin(request):
            return None
        self._task = asyncio.create_task(self._attempt(request))
        return self._task

    def start_regeneration(self) -> asyncio.Task[None] | None:
        if self._last_request is None:
            return None
        return self.start_generation(self._last_request)

    async def save(self, recipe_id: int) -> None:
        try:
            resp = await self.api.save(recipe_id)
        except Exception as e:
            logger.error("Error saving recipe %s: %r", recipe_id, e)
            return
        if not resp.is_success:
            logger.error(
                "Error saving recipe %s: status %s", recipe_id, resp.status_code
            )
            return
        if self._recipe is not None and self._recipe.id == recipe_id:
            self._recipe.is_saved = True

    def start_over(self) -> None:
        self._recipe = None
        self._error = None
        self._last_request = None

    async def close(self) -> None:
        """Cancel any attempt in flight and release the HTTP client."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        await self.api.close()


def read_recipe(resp: httpx.Response) -> Recipe:
    if not resp.is_success:
        raise GenerationFailed(_error_message(resp) or GENERATE_FAILED)
    data = resp.json()
    if not isinstance(data, dict) or not isinstance(data.get("recipe"), dict):
        raise GenerationFailed(f"{GENERATE_FAILED}: no recipe in response.")
    try:
        return Recipe.from_dict(data["recipe"])
    except (KeyError, TypeError, ValueError) as e:
        raise GenerationFailed(
            f"{GENERATE_FAILED}: malformed recipe in response."
        ) from e


def _error_message(resp: httpx.Response) -> str | None:
    try:
        data = resp.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return None
