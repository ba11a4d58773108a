import asyncio
import random
from typing import Any, Awaitable, Callable, List, Optional
from pydantic import BaseModel
from .errors import ComputationFailure
from .logger import logger
from .settings import DemoSettings

ComputationFactory = Callable[[int], Awaitable[Any]]

DEFAULT_MIN_DELAY_MS = 500
DEFAULT_MAX_DELAY_MS = 4000
DELAY_HISTORY_LIMIT = 100


class DelayStatistics(BaseModel):
    """
    Record of the delays handed out by a random source.

    Only the most recent DELAY_HISTORY_LIMIT delays are kept.
    """
    draw_count: int = 0
    historic_delays_ms: List[int] = []


class DelayRandom:
    """
    Shared random source for computation delays.

    One instance is created per demonstrator and reused for every draw, so
    back-to-back draws never come from freshly created generators.
    """
    def __init__(self,
            min_delay_ms: int = DEFAULT_MIN_DELAY_MS,
            max_delay_ms: int = DEFAULT_MAX_DELAY_MS,
            seed: Optional[int] = None):
        if max_delay_ms <= min_delay_ms:
            raise ValueError(f"Empty delay range: [{min_delay_ms}, {max_delay_ms})")
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self._random = random.Random(seed)
        self.statistics = DelayStatistics()

    @classmethod
    def from_settings(cls, settings: DemoSettings) -> "DelayRandom":
        return cls(settings.min_delay_ms, settings.max_delay_ms, settings.seed)

    def next_delay_ms(self) -> int:
        """Uniform draw from [min_delay_ms, max_delay_ms)."""
        delay = self._random.randrange(self.min_delay_ms, self.max_delay_ms)
        self.statistics.draw_count += 1
        self.statistics.historic_delays_ms.append(delay)
        del self.statistics.historic_delays_ms[:-DELAY_HISTORY_LIMIT]
        return delay


_shared_random = DelayRandom()


async def delayed_computation(order: int, delay_ms: Optional[int] = None, rng: Optional[DelayRandom] = None) -> int:
    """
    Sleep for a random bounded time, then hand back ``order`` unchanged.

    ``delay_ms`` pins the duration instead of drawing one from ``rng`` (or the
    module-wide source when no ``rng`` is given).
    """
    if delay_ms is None:
        delay_ms = (rng or _shared_random).next_delay_ms()
    logger.bind(object_name=f"computation_{order}").debug(f"Sleeping {delay_ms}ms")
    await asyncio.sleep(delay_ms / 1000)
    return order


def delay_factory(rng: DelayRandom) -> ComputationFactory:
    """Build the ``order -> awaitable`` factory the strategies launch from."""
    def factory(order: int) -> Awaitable[int]:
        return delayed_computation(order, rng=rng)
    return factory


async def _guarded(order: int, computation: Awaitable[Any]) -> Any:
    try:
        return await computation
    except Exception as e:
        raise ComputationFailure(order, e) from e


def launch_batch(factory: ComputationFactory, count: int) -> List[asyncio.Task]:
    """
    Launch ``factory(1) .. factory(count)`` as tasks without suspending.

    Any exception raised by a computation surfaces as ``ComputationFailure``:
    from its task when raised while running, or straight from this call when
    ``factory`` itself raises, after the tasks already launched are cancelled.
    Must be called from a running event loop.
    """
    tasks = []
    for order in range(1, count + 1):
        try:
            computation = factory(order)
        except Exception as e:
            for task in tasks:
                task.cancel()
            logger.bind(object_name="launch_batch").error(
                f"Factory failed for computation {order}, cancelled {len(tasks)} launched computations"
            )
            raise ComputationFailure(order, e) from e
        tasks.append(asyncio.create_task(_guarded(order, computation), name=f"computation_{order}"))
    return tasks
