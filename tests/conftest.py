import collections

import pytest

from zkcp.group import GroupParameters
from zkcp.storage import MemMaterialStorage, MemStorage
from zkcp.utils import RandomSource, ensure_bn
from zkcp.verifier import VerifierApplication


# (p, q, g, h): safe primes p = 2q + 1, g and h squares hence of order q.
GROUPS = [
    (23, 11, 4, 9),
    (2039, 1019, 4, 9),
    (1000919, 500459, 4, 9),
    (4294967087, 2147483543, 4, 9),
    (18446744073709550147, 9223372036854775073, 4, 9),
]


class ScriptedRandom(RandomSource):
    """Replays given draws, then falls back to real randomness."""

    def __init__(self, draws=(), tokens=()):
        self.draws = collections.deque(draws)
        self.tokens = collections.deque(tokens)

    def between(self, low, high):
        if self.draws:
            return ensure_bn(self.draws.popleft())
        return super().between(low, high)

    def token(self):
        if self.tokens:
            return self.tokens.popleft()
        return super().token()


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture(params=GROUPS, ids=lambda g: "p=%d" % g[0])
def group(request):
    return GroupParameters(*request.param)


@pytest.fixture
def small_group():
    return GroupParameters(p=23, q=11, g=4, h=9)


@pytest.fixture
def materials(group):
    return MemMaterialStorage({"alice": group})


@pytest.fixture
def storage():
    return MemStorage()


@pytest.fixture
def service(materials, storage):
    return VerifierApplication(materials, storage)
