from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from refcodes import config
from refcodes.error_handlers import register_error_handlers
from refcodes.routes import admin, catalog, codes, search

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Referral Code Finder API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(catalog.router)  # Top services and submission hints
app.include_router(search.router)  # Search, confirm, rotate, copy, feedback
app.include_router(codes.router)  # Code submission
app.include_router(admin.router)  # Password-gated moderation


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
