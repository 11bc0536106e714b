"""CLI entry point: python -m app (or ad-checkauth)."""
from __future__ import annotations

import logging
import sys

import uvicorn

from .ad import ConfigError
from .bootstrap import initialize_application
from .env_settings import get_env
from .main import create_app

logger = logging.getLogger("app")


def main() -> int:
    env = get_env()
    try:
        cfg = initialize_application()
    except ConfigError as e:
        logger.error("Did not setup correctly, so not continuing: %s", e)
        return 1

    app = create_app(directory_config=cfg)
    # Logging is already configured by initialize_application.
    uvicorn.run(app, host=env.host, port=env.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
