# ------------ Config ------------
HOST = "0.0.0.0"
PORT = 8080
WS_PATH = "/"                 # single websocket endpoint (also served on /ws)

OUTBOUND_QUEUE_SIZE = 50      # bounded per-connection outbound queue
SEND_TIMEOUT_SECONDS = 5.0    # a send slower than this marks the subscriber dead

LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
# --------------------------------
