"""Настройка логирования приложения.

- Консольный handler: для docker logs / stdout.
- Файловый handler (если задан log_dir): TimedRotatingFileHandler,
  ротация ежедневно (midnight), хранение retention_days файлов.
- Уровень: LOG_LEVEL (по умолчанию INFO).
"""
from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler

_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Установленные нами handlers, чтобы при повторном вызове удалять старые.
_handlers: list[logging.Handler] = []


def _level_from_str(level: str) -> int:
    level_str = (level or "INFO").strip().upper()
    if level_str not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level_str = "INFO"
    return getattr(logging, level_str, logging.INFO)


def setup_logging(level: str = "INFO", log_dir: str = "", retention_days: int = 30) -> None:
    """Настраивает корневой логгер приложения."""
    log_level = _level_from_str(level)
    retention_days = max(1, min(365, int(retention_days or 30)))

    root = logging.getLogger()
    while _handlers:
        h = _handlers.pop()
        root.removeHandler(h)
        h.close()

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    _handlers.append(ch)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        fh = TimedRotatingFileHandler(
            os.path.join(log_dir, "checkauth.log"),
            when="midnight",
            interval=1,
            backupCount=retention_days,
            encoding="utf-8",
            utc=True,
        )
        fh.suffix = "%Y-%m-%d"
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        _handlers.append(fh)

    root.setLevel(log_level)
    for h in _handlers:
        root.addHandler(h)

    # Подавляем слишком шумные логгеры
    logging.getLogger("uvicorn.access").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("ldap3").setLevel(max(log_level, logging.WARNING))

    logging.getLogger("app").info(
        "Logging configured: level=%s, dir=%s, retention=%d days",
        logging.getLevelName(log_level), log_dir or "-", retention_days,
    )
