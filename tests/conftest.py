"""Shared pytest fixtures."""

import pytest
from support import FakeChain, make_config


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def chain():
    return FakeChain()
