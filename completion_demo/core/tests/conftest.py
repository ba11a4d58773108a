import asyncio
from typing import Dict, List, Optional
import pytest


@pytest.fixture
def fixed_delays():
    """
    Build a computation factory with a pinned duration per identifier.

    ``fail`` maps identifiers to the exception raised once their delay ends.
    ``calls`` records every identifier the factory was invoked with.
    """
    def build(delays_ms: List[int], fail: Optional[Dict[int, Exception]] = None):
        fail = fail or {}

        async def computation(order: int) -> int:
            await asyncio.sleep(delays_ms[order - 1] / 1000)
            if order in fail:
                raise fail[order]
            return order

        def factory(order: int):
            factory.calls.append(order)
            return computation(order)

        factory.calls = []
        return factory

    return build
