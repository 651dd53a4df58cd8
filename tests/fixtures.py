"""
Test Fixtures

Shared test data and fakes for the semroute test suite.

The fake encoder maps known texts to hand-picked 3-dimensional vectors so
routing outcomes can be computed by hand:

    chitchat   ~ x axis
    weather    ~ y axis
    billing    ~ z axis
"""

import asyncio

from semroute.encoders.base import Encoder
from semroute.errors import StoreError
from semroute.router.models import Route
from semroute.stores.memory import InMemoryVectorStore


UTTERANCE_VECTORS = {
    "hi": [1.0, 0.0, 0.0],
    "hello there": [0.9, 0.1, 0.0],
    "will it rain tomorrow?": [0.0, 1.0, 0.0],
    "do I need an umbrella": [0.1, 0.9, 0.0],
    "I want a refund": [0.0, 0.0, 1.0],
    "I was charged twice": [0.0, 0.1, 0.9],
}

QUERY_VECTORS = {
    "good evening": [0.95, 0.05, 0.0],
    "is it raining": [0.0, 0.8, 0.2],
    "refund please": [0.0, 0.0, 1.0],
    "something unrelated": [-1.0, 0.0, 0.0],
    "wrong dimensions": [1.0, 0.0],
}

ALL_VECTORS = {**UTTERANCE_VECTORS, **QUERY_VECTORS}


def make_routes() -> list[Route]:
    """Three routes whose utterances all appear in UTTERANCE_VECTORS."""
    return [
        Route(name="chitchat", utterances=["hi", "hello there"]),
        Route(name="weather", utterances=["will it rain tomorrow?", "do I need an umbrella"]),
        Route(name="billing", utterances=["I want a refund", "I was charged twice"]),
    ]


class FakeEncoder(Encoder):
    """
    Lookup-table encoder.

    Texts listed in ``fail_on`` raise RuntimeError; unknown texts raise
    KeyError. Every call is recorded in ``calls``.
    """

    name = "fake-encoder"

    def __init__(self, vectors=None, fail_on=(), delay: float = 0.0):
        self.vectors = dict(ALL_VECTORS if vectors is None else vectors)
        self.fail_on = set(fail_on)
        self.delay = delay
        self.calls: list[str] = []
        self.closed = False

    async def encode(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if text in self.fail_on:
            raise RuntimeError(f"encoder unavailable for {text!r}")
        return list(self.vectors[text])

    async def close(self) -> None:
        self.closed = True


class RecordingStore(InMemoryVectorStore):
    """
    In-memory store that records write order.

    Keys in ``fail_put_on`` or ``fail_get_on`` raise StoreError. Reads
    sleep for ``get_delay`` seconds first.
    """

    def __init__(self, fail_get_on=(), fail_put_on=(), get_delay: float = 0.0):
        super().__init__()
        self.fail_get_on = set(fail_get_on)
        self.fail_put_on = set(fail_put_on)
        self.get_delay = get_delay
        self.puts: list[str] = []
        self.closed = False

    async def put(self, key, vector) -> None:
        self.puts.append(key)
        if key in self.fail_put_on:
            raise StoreError(key, "simulated write failure")
        await super().put(key, vector)

    async def get(self, key):
        if self.get_delay:
            await asyncio.sleep(self.get_delay)
        if key in self.fail_get_on:
            raise StoreError(key, "simulated read failure")
        return await super().get(key)

    async def close(self) -> None:
        self.closed = True
        await super().close()
