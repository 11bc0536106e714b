from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .ad import ConfigError, DirectoryConfig
from .bootstrap import initialize_application
from .env_settings import get_env
from .routers.checkauth import router as checkauth_router
from .schema import CheckAuthResponse

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg', '')}" if loc else str(err.get("msg", "")))
    return "Invalid request body: " + "; ".join(parts)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    msg = _describe_validation_error(exc)
    logger.warning("%s %s rejected: %s", request.method, request.url.path, msg)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=CheckAuthResponse.negative(msg).to_wire(),
    )


class PublicStaticFiles(StaticFiles):
    """Static files with the directory settings file (and any YAML) hidden.

    The settings file carries the bind password and usually sits in the
    served working directory.
    """

    def __init__(self, *, hidden: tuple[str, ...] = (), **kwargs) -> None:
        super().__init__(**kwargs)
        self.hidden = {os.path.realpath(p) for p in hidden if p}

    async def get_response(self, path: str, scope):
        full = os.path.realpath(os.path.join(str(self.directory), path))
        if path.lower().endswith((".yaml", ".yml")) or full in self.hidden:
            raise StarletteHTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return await super().get_response(path, scope)


def create_app(
    directory_config: Optional[DirectoryConfig] = None,
    static_dir: Optional[str] = None,
) -> FastAPI:
    """Build the application.

    With `directory_config=None` the settings file is loaded on startup
    (uvicorn app.main:app); a bad file aborts startup.
    """
    app = FastAPI(title="AD CheckAuth")
    app.state.directory_config = directory_config

    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(checkauth_router)

    @app.on_event("startup")
    def _startup():
        logger.info("**** Starting server ****")
        if app.state.directory_config is None:
            try:
                app.state.directory_config = initialize_application()
            except ConfigError as e:
                logger.error("Did not setup correctly, so not continuing: %s", e)
                raise
        logger.info("Server is up and listening")

    @app.on_event("shutdown")
    def _shutdown():
        logger.info("**** Server shutdown ****")

    # Must stay last: "/" catches everything not routed above.
    app.mount(
        "/",
        PublicStaticFiles(
            directory=static_dir or get_env().static_dir,
            html=True,
            check_dir=False,
            hidden=(get_env().config_path,),
        ),
        name="static",
    )
    return app


app = create_app()
