from typing import Union

from fastapi import status


class BrokerError(Exception):
    '''Base class for broker errors.'''


class EnvelopeDecodeError(BrokerError):
    '''An inbound frame could not be decoded as an envelope.'''

    def __init__(self, frame: Union[str, bytes], reason: str):
        super().__init__(reason)
        self.frame = frame
        self.reason = reason

    def __str__(self) -> str:
        frame = self.frame if isinstance(self.frame, str) else repr(self.frame)
        return f"{self.reason} in message: {frame[:200]}"


CLEAN_CLOSE_CODES = (status.WS_1000_NORMAL_CLOSURE, status.WS_1001_GOING_AWAY)


class TransportClosed(BrokerError):
    '''The peer closed the stream; `clean` is False for abnormal close codes.'''

    def __init__(self, code: int):
        super().__init__(f"connection closed with code {code}")
        self.code = code
        self.clean = code in CLEAN_CLOSE_CODES
