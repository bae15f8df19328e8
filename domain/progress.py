"""Fake progress for the generate page.

The stages are a UI affordance with fixed timings. They say nothing about
what the backend is actually doing.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, TypeAlias

from domain.models import GenerationStage


logger = logging.getLogger(__name__)


STAGES = (
    GenerationStage.initializing,
    GenerationStage.generating,
    GenerationStage.validating,
    GenerationStage.complete,
)
DEFAULT_DELAYS = (0.8, 2.0, 1.0, 0.5)


Sleep: TypeAlias = Callable[[float], Awaitable[None]]
OnStage: TypeAlias = Callable[[GenerationStage], None]


class StageSimulator:
    def __init__(
        self,
        delays: Iterable[float] = DEFAULT_DELAYS,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.delays = tuple(delays)
        if len(self.delays) != len(STAGES):
            raise ValueError(
                f"Expecting {len(STAGES)} stage delays, got {len(self.delays)}."
            )
        self._sleep = sleep

    @property
    def duration(self) -> float:
        return sum(self.delays)

    async def run(self, on_stage: OnStage) -> None:
        for stage, delay in zip(STAGES, self.delays):
            logger.debug("Stage %s for %ss", stage.value, delay)
            on_stage(stage)
            await self._sleep(delay)
