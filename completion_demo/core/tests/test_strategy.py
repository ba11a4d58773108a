import asyncio
from typing import Any, AsyncGenerator, List
import pytest
from completion_demo.core.computation import DelayRandom, delay_factory
from completion_demo.core.errors import ComputationFailure
from completion_demo.core.strategy import (
    AllStrategy,
    CompletionStrategy,
    EachAsCompletedManual,
    EachAsCompletedStreaming,
    OutputOrder,
    StrategyMeta,
    list_strategies,
)

AS_COMPLETED = [EachAsCompletedManual, EachAsCompletedStreaming]
ALL_STRATEGIES = [AllStrategy, *AS_COMPLETED]

# durations of 1000, 500, 4000, 1500, 3000 ms scaled down by 50
SCENARIO_DELAYS = [20, 10, 80, 30, 60]


def test_registry_lists_strategies_in_definition_order():
    assert list_strategies() == ["wait_all_in_sequence", "wait_all_as_completed", "when_each"]
    assert StrategyMeta.get("when_each") is EachAsCompletedStreaming
    with pytest.raises(KeyError):
        StrategyMeta.get("does_not_exist")


def test_output_order_from_meta():
    assert AllStrategy().output_order is OutputOrder.LAUNCH
    assert EachAsCompletedManual().output_order is OutputOrder.COMPLETION
    assert EachAsCompletedStreaming().output_order is OutputOrder.COMPLETION
    with pytest.raises(ValueError):
        OutputOrder.from_string("random")


def test_collect_must_be_async_generator():
    with pytest.raises(TypeError):
        class NotAGenerator(CompletionStrategy):
            async def collect(self, tasks: List[asyncio.Task]) -> List[Any]:
                return [await task for task in tasks]


def test_format_line():
    assert AllStrategy().format_line(3) == "wait_all_in_sequence: Task = 3"
    assert EachAsCompletedStreaming().format_line(1) == "when_each: Task = 1"


async def test_all_strategy_keeps_launch_order(fixed_delays):
    lines = []
    strategy = AllStrategy(emit=lines.append)
    results = await strategy.run(fixed_delays(SCENARIO_DELAYS), 5)

    assert results == [1, 2, 3, 4, 5]
    assert lines == [f"wait_all_in_sequence: Task = {order}" for order in [1, 2, 3, 4, 5]]


@pytest.mark.parametrize("strategy_class", AS_COMPLETED)
async def test_as_completed_follows_durations(strategy_class, fixed_delays):
    lines = []
    strategy = strategy_class(emit=lines.append)
    results = await strategy.run(fixed_delays(SCENARIO_DELAYS), 5)

    assert results == [2, 1, 4, 5, 3]
    assert lines == [f"{strategy.name}: Task = {order}" for order in [2, 1, 4, 5, 3]]


async def test_as_completed_strategies_agree(fixed_delays):
    delays = [45, 5, 35, 15, 25, 55]
    manual = await EachAsCompletedManual(emit=lambda line: None).run(fixed_delays(delays), 6)
    streaming = await EachAsCompletedStreaming(emit=lambda line: None).run(fixed_delays(delays), 6)

    assert manual == streaming
    assert manual == sorted(range(1, 7), key=lambda order: delays[order - 1])


@pytest.mark.parametrize("count", [0, 1, 3, 8])
async def test_all_strategy_returns_identifiers(count):
    factory = delay_factory(DelayRandom(1, 20, seed=count))
    assert await AllStrategy(emit=lambda line: None).run(factory, count) == list(range(1, count + 1))


@pytest.mark.parametrize("count", [0, 1, 3, 8])
@pytest.mark.parametrize("strategy_class", AS_COMPLETED)
async def test_as_completed_returns_permutation(strategy_class, count):
    factory = delay_factory(DelayRandom(1, 20, seed=count))
    results = await strategy_class(emit=lambda line: None).run(factory, count)

    assert len(results) == count
    assert sorted(results) == list(range(1, count + 1))


@pytest.mark.parametrize("strategy_class", ALL_STRATEGIES)
async def test_empty_batch_does_not_suspend(strategy_class, fixed_delays):
    factory = fixed_delays([])
    lines = []
    coroutine = strategy_class(emit=lines.append).run(factory, 0)

    with pytest.raises(StopIteration) as exc_info:
        coroutine.send(None)
    assert exc_info.value.value == []
    assert factory.calls == []
    assert lines == []


@pytest.mark.parametrize("strategy_class", ALL_STRATEGIES)
async def test_negative_count_is_rejected(strategy_class, fixed_delays):
    with pytest.raises(ValueError):
        await strategy_class().run(fixed_delays([]), -1)


async def test_all_strategy_surfaces_failure(fixed_delays):
    cause = RuntimeError("computation 3 broke")
    lines = []
    with pytest.raises(ComputationFailure) as exc_info:
        await AllStrategy(emit=lines.append).run(fixed_delays([10, 20, 30, 40, 50], fail={3: cause}), 5)

    assert exc_info.value.order == 3
    assert exc_info.value.__cause__ is cause
    assert lines == []


@pytest.mark.parametrize("strategy_class", AS_COMPLETED)
async def test_as_completed_fails_when_failure_is_reached(strategy_class, fixed_delays):
    cause = RuntimeError("computation 3 broke")
    lines = []
    strategy = strategy_class(emit=lines.append)
    with pytest.raises(ComputationFailure) as exc_info:
        await strategy.run(fixed_delays([10, 20, 30, 40, 50], fail={3: cause}), 5)

    assert exc_info.value.order == 3
    assert exc_info.value.__cause__ is cause
    assert lines == [f"{strategy.name}: Task = 1", f"{strategy.name}: Task = 2"]


@pytest.mark.parametrize("strategy_class", ALL_STRATEGIES)
async def test_failure_cancels_unfinished_computations(strategy_class):
    finished = []

    async def computation(order: int) -> int:
        if order == 1:
            await asyncio.sleep(0.01)
            raise RuntimeError("first one broke")
        await asyncio.sleep(1)
        finished.append(order)
        return order

    with pytest.raises(ComputationFailure):
        await strategy_class(emit=lambda line: None).run(computation, 3)
    await asyncio.sleep(0)
    assert finished == []


async def test_custom_strategy_reuses_run(fixed_delays):
    class Reversed(CompletionStrategy):
        meta = {
            "name": None,
            "output_order": "launch",
        }

        async def collect(self, tasks: List[asyncio.Task]) -> AsyncGenerator[Any, None]:
            results = await asyncio.gather(*tasks)
            for result in reversed(results):
                yield result

    assert await Reversed(emit=lambda line: None).run(fixed_delays([5, 1, 3]), 3) == [3, 2, 1]
    assert "Reversed" not in list_strategies()


@pytest.mark.parametrize("strategy_class", ALL_STRATEGIES)
async def test_factory_failure_cancels_launched_computations(strategy_class):
    finished = []
    cause = RuntimeError("cannot build computation 3")

    async def computation(order: int) -> int:
        await asyncio.sleep(0.05)
        finished.append(order)
        return order

    def factory(order: int):
        if order == 3:
            raise cause
        return computation(order)

    lines = []
    with pytest.raises(ComputationFailure) as exc_info:
        await strategy_class(emit=lines.append).run(factory, 5)
    await asyncio.sleep(0.1)

    assert exc_info.value.order == 3
    assert exc_info.value.__cause__ is cause
    assert finished == []
    assert lines == []
