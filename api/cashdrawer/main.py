import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .logging_config import setup_logging
from .reconciliation import ReconciliationError
from .routers import denominations, registers, register_sessions

settings = Settings()

setup_logging(settings.log_level, format_as_json=settings.log_json)
logger = logging.getLogger(__name__)

if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.app_env, send_default_pii=False)

app = FastAPI(title=settings.app_name)

# CORS: allow web origin for dev
allowed_origins = {str(settings.app_url), "http://localhost:3000", "http://127.0.0.1:3000"}
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReconciliationError)
async def reconciliation_error_handler(request: Request, exc: ReconciliationError):
    return JSONResponse(status_code=400, content=exc.to_dict())


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": settings.app_name,
        "env": settings.app_env,
        "currency": settings.currency,
    }

# Routers
app.include_router(denominations.router)
app.include_router(registers.router)
app.include_router(register_sessions.router)

logger.info("Started %s (%s)", settings.app_name, settings.app_env)
