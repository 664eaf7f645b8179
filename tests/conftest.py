import pytest

from tests.helpers import RWD, WEEK, add_reward, make_world


@pytest.fixture
def world():
    return make_world()


@pytest.fixture
def linear_world(world):
    """World with RWD registered as a one-week linear stream."""
    add_reward(world, RWD, WEEK)
    return world
