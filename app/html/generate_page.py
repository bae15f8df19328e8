from jinja2 import Environment
from markdown2 import (  # pyright: ignore[reportMissingTypeStubs]
    markdown,  # pyright: ignore[reportUnknownVariableType]
)
from markupsafe import Markup

from domain import navigation
from domain.workflow import GenerationWorkflow


STAGE_LABELS = {
    "initializing": "Getting things ready",
    "generating": "Creating your recipe",
    "validating": "Checking it against your nutrition profile",
    "complete": "Finishing touches",
}


class GeneratePage:
    def __init__(
        self,
        workflow: GenerationWorkflow,
        *,
        environment: Environment,
        template_name: str = "generate.html",
        panel_template_name: str = "generate-panel.html",
        form_error: str | None = None,
    ) -> None:
        self.workflow = workflow
        self.env = environment
        self.name = template_name
        self.panel_name = panel_template_name
        self.form_error = form_error

    @property
    def view(self) -> str:
        return self.workflow.view.value

    @property
    def stage(self) -> str:
        return self.workflow.stage.value

    @property
    def stage_label(self) -> str:
        return STAGE_LABELS[self.stage]

    @property
    def description(self) -> str:
        recipe = self.workflow.recipe
        if recipe is None:
            return ""
        return Markup(markdown(recipe.description))

    @property
    def recipe_url(self) -> str:
        recipe = self.workflow.recipe
        return "" if recipe is None else navigation.recipe_detail(recipe.id)

    @property
    def routes(self) -> dict[str, str]:
        return {
            "generate": navigation.GENERATE,
            "recipes": navigation.RECIPES,
            "nutrition_settings": navigation.NUTRITION_SETTINGS,
        }

    def render(self) -> str:
        return self.env.get_template(self.name).render(page=self, workflow=self.workflow)

    def render_panel(self) -> str:
        return self.env.get_template(self.panel_name).render(
            page=self, workflow=self.workflow
        )
