from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..ad import DirectoryConfig, DirectoryConnectError, DirectoryError
from ..deps import get_directory_config, get_session_factory
from ..schema import CheckAuthRequest, CheckAuthResponse
from ..services import check_access
from ..services.checkauth import SessionFactory

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=CheckAuthResponse.negative(message).to_wire())


# Sync on purpose: ldap3 blocks, FastAPI runs this in its thread pool.
@router.post("/checkauth", response_model=CheckAuthResponse, response_model_by_alias=True)
def checkauth(
    req: CheckAuthRequest,
    cfg: Optional[DirectoryConfig] = Depends(get_directory_config),
    session_factory: SessionFactory = Depends(get_session_factory),
):
    logger.info("====> checkauth")
    try:
        logger.info("Got %d, %s", req.id, req.groupname)
        if cfg is None:
            logger.error("Directory is not configured")
            return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Directory is not configured")
        try:
            result = check_access(cfg, req, session_factory)
        except DirectoryConnectError as e:
            logger.error("Directory unavailable for id=%s: %s", req.id, e)
            return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(e))
        except DirectoryError as e:
            logger.error("Directory search failed for id=%s: %s", req.id, e)
            return _error_response(status.HTTP_502_BAD_GATEWAY, str(e))
        return result
    finally:
        logger.info("<==== checkauth")
