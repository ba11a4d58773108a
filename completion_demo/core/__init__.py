from .computation import DelayRandom, delayed_computation, delay_factory, launch_batch
from .demonstrator import CompletionDemonstrator
from .errors import CompletionDemoError, ComputationFailure
from .pipe import CompletionPipe
from .settings import DemoSettings
from .strategy import (
    AllStrategy,
    CompletionStrategy,
    EachAsCompletedManual,
    EachAsCompletedStreaming,
    OutputOrder,
    StrategyMeta,
    list_strategies,
)

__all__ = [
    "AllStrategy",
    "CompletionDemonstrator",
    "CompletionDemoError",
    "CompletionPipe",
    "CompletionStrategy",
    "ComputationFailure",
    "DelayRandom",
    "DemoSettings",
    "EachAsCompletedManual",
    "EachAsCompletedStreaming",
    "OutputOrder",
    "StrategyMeta",
    "delay_factory",
    "delayed_computation",
    "launch_batch",
    "list_strategies",
]
