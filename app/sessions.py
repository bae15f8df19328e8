from collections import OrderedDict
import logging
import time
from typing import Callable, TypeAlias
import uuid

from domain.navigation import RedirectNavigator
from domain.workflow import GenerationWorkflow


logger = logging.getLogger(__name__)


IDLE_TIMEOUT = 60 * 30
MAX_WORKFLOWS = 1000


WorkflowFactory: TypeAlias = Callable[[dict[str, str]], GenerationWorkflow]


class WorkflowRegistry:
    """One generation workflow per browser session.

    Workflows are kept in least recently used order. Ones idle for longer than
    `idle_timeout` seconds, or beyond `max_workflows`, are closed and dropped.
    """

    def __init__(
        self,
        factory: WorkflowFactory,
        *,
        idle_timeout: float = IDLE_TIMEOUT,
        max_workflows: int = MAX_WORKFLOWS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self.idle_timeout = idle_timeout
        self.max_workflows = max_workflows
        self._clock = clock
        self._workflows: OrderedDict[str, GenerationWorkflow] = OrderedDict()
        self._seen: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._workflows)

    def get(self, key: str | None) -> GenerationWorkflow | None:
        if key is None:
            return None
        return self._workflows.get(key)

    def _touch(self, key: str) -> None:
        self._seen[key] = self._clock()
        self._workflows.move_to_end(key)

    async def get_or_create(
        self, key: str | None, cookies: dict[str, str]
    ) -> tuple[str, GenerationWorkflow]:
        workflow = self.get(key)
        if key is not None and workflow is not None:
            if not workflow.profile_loading:
                self._touch(key)
                await self.evict()
                return key, workflow
            # Never got a profile, most likely sent to log in. Start again with
            # the cookies of this request.
            await self.discard(key)

        key = uuid.uuid4().hex
        workflow = self._factory(cookies)
        self._workflows[key] = workflow
        self._touch(key)
        logger.info("New workflow %s", key)
        await self.evict()
        await workflow.load_profile()
        return key, workflow

    async def evict(self) -> None:
        now = self._clock()
        for key in list(self._workflows):
            idle = now - self._seen[key] > self.idle_timeout
            if not idle and len(self._workflows) <= self.max_workflows:
                break
            logger.info("Evicting workflow %s", key)
            await self.discard(key)

    async def discard(self, key: str) -> None:
        workflow = self._workflows.pop(key, None)
        self._seen.pop(key, None)
        if workflow is not None:
            await workflow.close()

    async def close(self) -> None:
        for key in list(self._workflows):
            await self.discard(key)


def pending_redirect(workflow: GenerationWorkflow) -> str | None:
    navigator = workflow.navigator
    if isinstance(navigator, RedirectNavigator):
        return navigator.pop()
    return None
