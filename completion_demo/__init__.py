"""
Completion Demo

Three ways to wait on a batch of concurrently running computations:
all at once, each as it completes by hand, and each as it completes
through a streaming completion-order pipe.
"""

from .core import (
    AllStrategy,
    CompletionDemonstrator,
    CompletionDemoError,
    CompletionPipe,
    CompletionStrategy,
    ComputationFailure,
    DelayRandom,
    DemoSettings,
    EachAsCompletedManual,
    EachAsCompletedStreaming,
    OutputOrder,
    StrategyMeta,
    delay_factory,
    delayed_computation,
    launch_batch,
    list_strategies,
)

__version__ = "1.0.0"

__all__ = [
    # Strategies
    "CompletionStrategy",
    "AllStrategy",
    "EachAsCompletedManual",
    "EachAsCompletedStreaming",
    "OutputOrder",
    "StrategyMeta",
    "list_strategies",

    # Computations
    "DelayRandom",
    "delayed_computation",
    "delay_factory",
    "launch_batch",
    "CompletionPipe",

    # Running the demo
    "CompletionDemonstrator",
    "DemoSettings",

    # Errors
    "CompletionDemoError",
    "ComputationFailure",
]
