import uuid
from typing import Any, Callable, Dict, List, Optional
from .computation import DelayRandom, delay_factory
from .logger import logger
from .settings import DemoSettings
from .strategy import StrategyMeta, list_strategies


class CompletionDemonstrator:
    """
    Runs registered completion strategies over fresh computation batches.

    All strategies share one seeded random source, so every batch draws its
    delays from the same generator.

    Attributes:
        settings (DemoSettings): batch size, delay bounds and seed.
        rng (DelayRandom): shared random source for computation delays.
        emit (Callable[[str], None]): output sink handed to each strategy.
    """
    def __init__(self,
            settings: Optional[DemoSettings] = None,
            emit: Callable[[str], None] = print,
            session_id: Optional[str] = None):
        self.settings = settings or DemoSettings()
        self.emit = emit
        self.rng = DelayRandom.from_settings(self.settings)
        self.factory = delay_factory(self.rng)

        self.session_id = session_id or str(uuid.uuid4())[:8]
        self.logger = logger.bind(object_name="CompletionDemonstrator", session_id=self.session_id)
        self.logger.debug(f"Initialized demonstrator with settings: {self.settings.model_dump()}")

    async def run(self, name: str) -> List[Any]:
        """Run the strategy registered under ``name`` over a new batch."""
        strategy_class = StrategyMeta.get(name)
        strategy = strategy_class(emit=self.emit)
        strategy.logger = strategy.logger.bind(session_id=self.session_id)
        self.logger.info(f"Running {name} over computations {self.settings.identifiers}")
        return await strategy.run(self.factory, self.settings.count)

    async def run_all(self) -> Dict[str, List[Any]]:
        """
        Run every registered strategy once, one after another.

        Each strategy's batch finishes before the next one is launched.
        """
        results = {}
        for name in list_strategies():
            results[name] = await self.run(name)
        self.logger.info(f"Completed {len(results)} strategies, drew {self.rng.statistics.draw_count} delays")
        return results
