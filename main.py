"""
myFlix API: application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn

from api.app import create_app
from config.settings import get_settings

config = get_settings()

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
    stream=sys.stdout,
)
for _noisy in ("pymongo", "motor", "httpx", "urllib3"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

app = create_app(config)

if __name__ == "__main__":
    logger.info("Listening on %s:%d", config.host, config.port)
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
