import contextlib
import functools
import logging
from typing import Any, AsyncIterator

from databases import Database
import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape
from rich.logging import RichHandler
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse, Response
from starlette.routing import Route

from app import config
from app.html.generate_page import GeneratePage
from app.sessions import WorkflowRegistry, pending_redirect
from domain import navigation
from domain.actions import (
    ActionState,
    FormData,
    NotAuthenticated,
    validated_action,
    validated_action_with_user,
)
from domain.db import UsersRepository, get_database
from domain.models import RecipeGenerationRequest, SaveRecipeForm, User
from domain.navigation import RedirectNavigator
from domain.progress import StageSimulator
from domain.recipe_api import RecipeApi, recipe_api_client_factory
from domain.workflow import GenerationWorkflow


logger = logging.getLogger(__name__)


CONFIG = config.Config()

SESSION_KEY = "workflow"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def redirect(request: Request, url: str) -> Response:
    # htmx swaps a followed redirect into the panel, so ask it to navigate.
    if request.headers.get("HX-Request") == "true":
        return Response(headers={"HX-Redirect": url})
    return see_other(url)


def page(request: Request, workflow: GenerationWorkflow, **kwargs: Any) -> GeneratePage:
    return GeneratePage(workflow, environment=request.app.state.templates, **kwargs)


async def current_user(request: Request) -> User | None:
    user_id = request.session.get("user_id")
    if user_id is None:
        return None
    users: UsersRepository = request.app.state.users
    return await users.get(int(user_id))


async def workflow_for(request: Request) -> GenerationWorkflow | Response:
    """The session's workflow, or a redirect when the workflow navigated away.

    A workflow that navigated is dropped so the next visit starts afresh.
    """
    registry: WorkflowRegistry = request.app.state.workflows
    key, workflow = await registry.get_or_create(
        request.session.get(SESSION_KEY), dict(request.cookies)
    )
    if (location := pending_redirect(workflow)) is not None:
        await registry.discard(key)
        request.session.pop(SESSION_KEY, None)
        return redirect(request, location)
    request.session[SESSION_KEY] = key
    return workflow


async def generate(request: Request) -> Response:
    workflow = await workflow_for(request)
    if isinstance(workflow, Response):
        return workflow

    match request.method.lower():
        case "get":
            return HTMLResponse(page(request, workflow).render())
        case "post":

            async def start(
                data: RecipeGenerationRequest, form_data: FormData, user: User
            ) -> ActionState:
                logger.info("Generating recipe for user %s", user.id)
                workflow.start_generation(data)
                return {"success": "Generation started."}

            action = validated_action_with_user(
                RecipeGenerationRequest,
                start,
                get_user=functools.partial(current_user, request),
            )
            async with request.form() as form:
                try:
                    state = await action({}, form)
                except NotAuthenticated:
                    return see_other(navigation.LOGIN)

            if "error" in state:
                html = page(request, workflow, form_error=state["error"]).render()
                return HTMLResponse(html, status_code=400)
            return see_other(navigation.GENERATE)
        case _:
            raise ValueError("Unsupported method.")


async def generate_panel(request: Request) -> Response:
    workflow = await workflow_for(request)
    if isinstance(workflow, Response):
        return workflow
    return HTMLResponse(page(request, workflow).render_panel())


async def regenerate(request: Request) -> Response:
    workflow = await workflow_for(request)
    if isinstance(workflow, Response):
        return workflow
    workflow.start_regeneration()
    return see_other(navigation.GENERATE)


async def start_over(request: Request) -> Response:
    workflow = await workflow_for(request)
    if isinstance(workflow, Response):
        return workflow
    workflow.start_over()
    return see_other(navigation.GENERATE)


async def save(request: Request) -> Response:
    workflow = await workflow_for(request)
    if isinstance(workflow, Response):
        return workflow

    async def save_recipe(data: SaveRecipeForm, form_data: FormData) -> ActionState:
        await workflow.save(data.recipe_id)
        return {}

    async with request.form() as form:
        state = await validated_action(SaveRecipeForm, save_recipe)({}, form)
    if "error" in state:
        logger.warning("Invalid save form: %s", state["error"])
    return see_other(navigation.GENERATE)


def create_app(
    cfg: config.Config,
    *,
    database: Database | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Starlette:
    def workflow_factory(cookies: dict[str, str]) -> GenerationWorkflow:
        client = recipe_api_client_factory(
            cfg.api_base_url,
            cookies=cookies,
            timeout=cfg.api_timeout,
            transport=transport,
        )
        return GenerationWorkflow(
            RecipeApi(client),
            navigator=RedirectNavigator(),
            simulator=StageSimulator(cfg.stage_delays),
        )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        configure_logging(cfg.log_level)
        db = get_database(cfg.postgres_url) if database is None else database
        await db.connect()
        app.state.users = UsersRepository(db)
        yield
        await app.state.workflows.close()
        await db.disconnect()

    app = Starlette(
        debug=True if cfg.env == config.Env.local else False,
        routes=[
            Route(navigation.GENERATE, generate, methods=["GET", "POST"]),
            Route(f"{navigation.GENERATE}/panel", generate_panel),
            Route(f"{navigation.GENERATE}/regenerate", regenerate, methods=["POST"]),
            Route(f"{navigation.GENERATE}/start-over", start_over, methods=["POST"]),
            Route(f"{navigation.GENERATE}/save", save, methods=["POST"]),
        ],
        middleware=[Middleware(SessionMiddleware, secret_key=cfg.session_secret)],
        lifespan=lifespan,
    )

    app.state.config = cfg
    app.state.templates = Environment(
        loader=FileSystemLoader(cfg.html_dir),
        autoescape=select_autoescape(),
    )
    app.state.workflows = WorkflowRegistry(
        workflow_factory,
        idle_timeout=cfg.workflow_idle_timeout,
        max_workflows=cfg.max_workflows,
    )
    return app


app = create_app(CONFIG)
