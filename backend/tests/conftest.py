# tests/conftest.py
import pytest

from msgqueue import Broker
from msgqueue.models import Connection

from helpers import FakeWebSocket


@pytest.fixture
def broker():
    return Broker()


@pytest.fixture
def make_connection():
    def _make(**kwargs):
        ws_kwargs = {k: kwargs.pop(k) for k in ("fail_send", "send_delay") if k in kwargs}
        return Connection(FakeWebSocket(**ws_kwargs), **kwargs)

    return _make
