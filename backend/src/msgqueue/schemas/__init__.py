from .schemas import Envelope, Role, TransmissionMode, decode_envelope
