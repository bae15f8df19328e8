import pytest

from domain.models import GenerationStage
from domain.progress import DEFAULT_DELAYS, STAGES, StageSimulator

from conftest import RecordingSleep


def test_default_duration() -> None:
    assert StageSimulator().duration == pytest.approx(4.3)
    assert DEFAULT_DELAYS == (0.8, 2.0, 1.0, 0.5)


@pytest.mark.parametrize("delays", ((), (1.0, 1.0, 1.0), (1.0,) * 5))
def test_one_delay_per_stage(delays: tuple[float, ...]) -> None:
    with pytest.raises(ValueError):
        StageSimulator(delays)


@pytest.mark.asyncio
async def test_run_announces_each_stage_before_waiting(sleep: RecordingSleep) -> None:
    seen: list[GenerationStage] = []

    def on_stage(stage: GenerationStage) -> None:
        seen.append(stage)
        assert len(sleep.delays) == len(seen) - 1

    await StageSimulator((1, 2, 3, 4), sleep=sleep).run(on_stage)

    assert seen == list(STAGES)
    assert sleep.delays == [1, 2, 3, 4]
