from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from refcodes.errors import ExternalStoreError, ReferralError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ReferralError)
    async def referral_error_handler(request: Request, exc: ReferralError):
        if isinstance(exc, ExternalStoreError):
            logger.error("Store failure on %s: %s", request.url.path, exc.message)
        else:
            logger.info("%s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())
