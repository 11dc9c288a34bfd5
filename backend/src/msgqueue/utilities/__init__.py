from .constants import (
    HOST,
    PORT,
    WS_PATH,
    OUTBOUND_QUEUE_SIZE,
    SEND_TIMEOUT_SECONDS,
    LOG_LEVEL,
    LOG_FORMAT,
)
from .errors import BrokerError, EnvelopeDecodeError, TransportClosed, CLEAN_CLOSE_CODES
from .utility_functions import (
    now,
    now_ts,
    uptime_seconds,
    encode_frame,
    make_health,
    make_topic_summary,
    make_topic_stats,
)
