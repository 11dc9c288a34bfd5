from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError, field_validator

from ..utilities import EnvelopeDecodeError


class Role(str, Enum):
    PRODUCER = "producer"
    CONSUMER = "consumer"


class TransmissionMode(str, Enum):
    BUFFERED = "buffered"
    BROADCAST = "broadcast"


class Envelope(BaseModel):
    '''
    One protocol message. `role` and `transmission_mode` stay plain strings so
    an unknown value is rejected by the router rather than failing to decode.
    Types are strict ("true" is not a bool) and a JSON null reads as the
    field's zero value.
    '''

    model_config = ConfigDict(populate_by_name=True)

    role: StrictStr = ""
    # stricter than a zero-value decode: an empty or missing topic is malformed
    topic: StrictStr = Field(min_length=1)
    subscribe: StrictBool = False                                   # consumer only
    transmission_mode: StrictStr = Field("", alias="transmissionMode")  # producer only
    message: StrictStr = ""

    @field_validator("role", "topic", "transmission_mode", "message", mode="before")
    @classmethod
    def _null_string(cls, value):
        return "" if value is None else value

    @field_validator("subscribe", mode="before")
    @classmethod
    def _null_bool(cls, value):
        return False if value is None else value

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


def decode_envelope(frame: Union[str, bytes]) -> Envelope:
    try:
        return Envelope.model_validate_json(frame)
    except ValidationError as exc:
        raise EnvelopeDecodeError(frame, f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}") from exc
