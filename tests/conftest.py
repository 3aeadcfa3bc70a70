import sys, os

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
for path in (SRC, ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

import pytest

from tests.helpers import FixedClock, make_game


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def game(clock):
    return make_game(["cat", "dog", "cats", "disc"], clock=clock)
