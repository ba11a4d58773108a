import asyncio
import uuid
from typing import AsyncGenerator, Iterable, Optional
from pydantic import BaseModel
from .logger import logger


class PipeStatistics(BaseModel):
    """
    Statistics about the pipe.
    """
    historic_put_count: int = 0
    historic_get_count: int = 0


class CompletionPipe:
    """
    Completion-ordered stream over a batch of tasks.

    Every task pushes itself onto one shared ``asyncio.Queue`` when it
    finishes, so pulling the next finished task is a single queue get rather
    than a scan of everything still outstanding. The pipe hands out the task
    handles themselves: a failed computation only raises once the consumer
    awaits (or calls ``result()`` on) its handle.

    The pipe yields exactly ``len(tasks)`` handles and can be iterated once.

    Attributes:
        queue (asyncio.Queue): finished tasks, in the order they finished.
    """
    def __init__(self, tasks: Iterable[asyncio.Task], pipe_id: Optional[str] = None, logger=logger):
        if pipe_id is None:
            self._pipe_id = f"pipe_{str(uuid.uuid4())}"
        else:
            self._pipe_id = pipe_id

        self.queue: asyncio.Queue = asyncio.Queue()
        self.logger = logger.bind(object_name=self._pipe_id)
        self.statistics = PipeStatistics()

        self._size = 0
        self._remaining = 0
        self._iterated = False
        for task in tasks:
            self._size += 1
            self._remaining += 1
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self.statistics.historic_put_count += 1
        self.logger.debug(f"[{self._pipe_id}] [PUT] {task.get_name()}")
        self.queue.put_nowait(task)

    def __len__(self) -> int:
        return self._size

    @property
    def remaining(self) -> int:
        return self._remaining

    async def get(self) -> asyncio.Task:
        """Suspend until the next task finishes and return its handle."""
        if self._remaining == 0:
            raise RuntimeError(f"[{self._pipe_id}] all {self._size} tasks have already been delivered")
        task = await self.queue.get()
        self._remaining -= 1
        self.statistics.historic_get_count += 1
        self.logger.debug(f"[{self._pipe_id}] [GET] {task.get_name()}, {self._remaining} remaining")
        return task

    def __aiter__(self) -> AsyncGenerator[asyncio.Task, None]:
        if self._iterated:
            raise RuntimeError(f"[{self._pipe_id}] a completion pipe can only be iterated once")
        self._iterated = True
        return self._drain()

    async def _drain(self) -> AsyncGenerator[asyncio.Task, None]:
        while self._remaining:
            yield await self.get()
