from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ambassador.api.admin import router as admin_router
from ambassador.api.ambassadors import router as ambassadors_router
from ambassador.api.applications import router as applications_router
from ambassador.api.badges import router as badges_router
from ambassador.api.dependencies import program
from ambassador.api.errors import ambassador_error_handler
from ambassador.api.health import router as health_router
from ambassador.api.maintenance import router as maintenance_router
from ambassador.core.config import SETTINGS
from ambassador.core.logging import setup_logging
from ambassador.db.engine import lifespan_db
from ambassador.db.redis import lifespan_redis
from ambassador.services.errors import AmbassadorError

setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_db(program.engine):
        async with lifespan_redis():
            yield


app = FastAPI(
    title="ambassador-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_exception_handler(AmbassadorError, ambassador_error_handler)  # type: ignore[arg-type]

app.include_router(health_router)
app.include_router(applications_router)
app.include_router(ambassadors_router)
app.include_router(badges_router)
app.include_router(admin_router)
app.include_router(maintenance_router)

logger.info(
    "ambassador-service started  env=%s log_level=%s duration_days=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.duration_days,
    "on" if SETTINGS.is_dev else "off",
)
