"""Application bootstrap: logging and directory settings, once per process."""

import logging

from .ad import DirectoryConfig
from .config import load_directory_config
from .env_settings import get_env
from .log_config import setup_logging

logger = logging.getLogger(__name__)


def initialize_application() -> DirectoryConfig:
    """Configure logging and load the directory settings.

    Raises ConfigError if the settings file is missing or invalid; callers
    must treat that as fatal and not start serving.
    """
    env = get_env()
    setup_logging(level=env.log_level, log_dir=env.log_dir, retention_days=env.log_retention_days)
    logger.info("Reading config...")
    cfg = load_directory_config(env.config_path)
    logger.info(
        "Directory %s, base %s, id attribute %s, starttls=%s, tls_validate=%s",
        cfg.address, cfg.base_dn, cfg.search_attr, cfg.starttls, cfg.tls_validate,
    )
    return cfg
