import asyncio
import logging

import pytest


class FakeProbe:
    """Заменяет системный ping: отвечают только адреса из responding"""

    def __init__(self, responding=(), rtt_ms=1.5, delay=0.0, fail_on=None):
        self.responding = set(responding)
        self.rtt_ms = rtt_ms
        self.delay = delay
        self.fail_on = fail_on
        self.calls = []

    async def __call__(self, address, on_success, on_complete):
        self.calls.append(address)
        if self.fail_on is not None and address == self.fail_on:
            from ip_sweeper.errors import ProbeTransportError
            raise ProbeTransportError(address, "unresolvable")
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)
        if address in self.responding:
            on_success(address, self.rtt_ms)
        on_complete(address)


@pytest.fixture
def fake_probe_factory():
    return FakeProbe


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
