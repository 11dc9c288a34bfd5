"""
In-memory topic message queue served over a single websocket endpoint.
"""

from .broker import Broker
from .protocol import Outcome, ProtocolRouter, RouterState

__version__ = "0.1.0"
