from __future__ import annotations

import logging
from typing import Callable

from ..ad import DirectoryConfig, DirectorySession, open_session
from ..schema import CheckAuthRequest, CheckAuthResponse
from .verify import verify

logger = logging.getLogger(__name__)

SessionFactory = Callable[[DirectoryConfig], DirectorySession]


def check_access(
    cfg: DirectoryConfig,
    req: CheckAuthRequest,
    session_factory: SessionFactory = open_session,
) -> CheckAuthResponse:
    """Открывает сессию каталога на время одного запроса и выносит вердикт.

    Сессия закрывается на любом пути выхода (OK, отказ, ошибка).
    DirectoryConnectError / DirectorySearchError пробрасываются наверх.
    """
    with session_factory(cfg) as session:
        result = verify(session, req.id, req.groupname, cfg=cfg)
    logger.info("Check id=%s group=%r -> txok=%s (%s)", req.id, req.groupname, result.ok, result.message)
    return result
