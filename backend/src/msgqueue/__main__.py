import logging

import uvicorn

from .utilities import HOST, LOG_FORMAT, LOG_LEVEL, PORT

logger = logging.getLogger("msgqueue")


def main():
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    logger.info("Server listening on %s:%d", HOST, PORT)
    uvicorn.run("msgqueue.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
