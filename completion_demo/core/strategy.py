import asyncio
import inspect
import uuid
from abc import ABC, ABCMeta, abstractmethod
from enum import Enum
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional, Type
from .computation import ComputationFactory, delayed_computation, launch_batch
from .errors import ComputationFailure
from .logger import logger
from .pipe import CompletionPipe


class StrategyMeta(ABCMeta):
    registry: Dict[str, Type["CompletionStrategy"]] = {}

    def __new__(mcs, name, bases, namespace):
        collect = namespace.get("collect")
        if (collect is not None
                and not getattr(collect, "__isabstractmethod__", False)
                and not inspect.isasyncgenfunction(collect)):
            raise TypeError(
                f"collect in {name} must be an async generator. "
                f"Please define it as: async def collect(self, tasks: List[asyncio.Task]) -> AsyncGenerator[Any, None]:"
            )

        cls = super().__new__(mcs, name, bases, namespace)
        if "meta" in namespace:
            meta = namespace["meta"]
            cls._meta = meta
            if meta.get("name"):
                mcs.registry[meta["name"]] = cls
        return cls

    @classmethod
    def get(cls, name: str) -> Type["CompletionStrategy"]:
        return cls.registry[name]


def list_strategies() -> List[str]:
    """Registered strategy names, in definition order."""
    return list(StrategyMeta.registry)


class OutputOrder(Enum):
    """
    Order in which a strategy hands out results.
    """
    LAUNCH = "launch"
    COMPLETION = "completion"

    @classmethod
    def from_string(cls, value: str) -> "OutputOrder":
        """Create an OutputOrder from a string value."""
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"Invalid output order: {value}")


class CompletionStrategy(ABC, metaclass=StrategyMeta):
    """
    Launches a batch of computations and collects their results.

    Subclasses only decide how to wait: ``collect`` receives the launched
    tasks and yields results in whatever order the strategy produces them.

    Attributes:
        name (str): registry name, also the prefix of every emitted line.
        output_order (OutputOrder): launch order or completion order.
        emit (Callable[[str], None]): receives one line per produced result.
    """
    meta: Dict[str, Any] = {
        "name": None,
        "output_order": "completion",
    }

    def __init__(self, emit: Callable[[str], None] = print, strategy_id: Optional[str] = None):
        meta = getattr(self.__class__, "_meta", {})
        self.name = meta["name"]
        self.output_order = OutputOrder.from_string(meta.get("output_order", "completion"))
        self.emit = emit

        self.strategy_id = strategy_id
        if self.strategy_id is None:
            self.strategy_id = f"{self.name}_{str(uuid.uuid4())[:8]}"
        self.logger = logger.bind(object_name=self.strategy_id)

    @abstractmethod
    async def collect(self, tasks: List[asyncio.Task]) -> AsyncGenerator[Any, None]:
        ...

    def format_line(self, result: Any) -> str:
        return f"{self.name}: Task = {result}"

    async def run(self, factory: Optional[ComputationFactory] = None, count: int = 5) -> List[Any]:
        """
        Launch ``factory(1) .. factory(count)`` and collect every result.

        Emits one line per result as it is produced and returns the results in
        the order they were produced. A ``ComputationFailure`` propagates as
        soon as the failed computation is observed; anything still running at
        that point is cancelled.
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if factory is None:
            factory = delayed_computation

        tasks = []
        results = []
        try:
            tasks = launch_batch(factory, count)
            self.logger.info(f"Launched {count} computations, output order: {self.output_order.value}")
            async for result in self.collect(tasks):
                self.emit(self.format_line(result))
                results.append(result)
        except ComputationFailure as e:
            self.logger.error(f"{self.name} failed after {len(results)} results: {e}")
            raise
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                self.logger.warning(f"Cancelled {len(pending)} unfinished computations")

        self.logger.info(f"{self.name} collected {len(results)} results")
        return results


class AllStrategy(CompletionStrategy):
    """
    Wait for the whole batch at once; results come back in launch order.
    """
    meta = {
        "name": "wait_all_in_sequence",
        "output_order": "launch",
    }

    async def collect(self, tasks: List[asyncio.Task]) -> AsyncGenerator[Any, None]:
        results = await asyncio.gather(*tasks)
        for result in results:
            yield result


class EachAsCompletedManual(CompletionStrategy):
    """
    Wait for whichever task finishes next, by hand.

    Each round rescans the shrinking working list for a finished task, so the
    bookkeeping costs O(N) per result.
    """
    meta = {
        "name": "wait_all_as_completed",
        "output_order": "completion",
    }

    async def collect(self, tasks: List[asyncio.Task]) -> AsyncGenerator[Any, None]:
        working = list(tasks)
        while working:
            await asyncio.wait(working, return_when=asyncio.FIRST_COMPLETED)
            finished = next(task for task in working if task.done())
            working.remove(finished)
            self.logger.debug(f"Selected {finished.get_name()}, {len(working)} still running")
            yield await finished


class EachAsCompletedStreaming(CompletionStrategy):
    """
    Pull finished tasks from a CompletionPipe, one at a time.
    """
    meta = {
        "name": "when_each",
        "output_order": "completion",
    }

    async def collect(self, tasks: List[asyncio.Task]) -> AsyncGenerator[Any, None]:
        async for task in CompletionPipe(tasks, pipe_id=f"{self.strategy_id}_pipe"):
            yield await task
