import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text

from .config import settings
from .database import SessionLocal
from .redis_client import redis_client
from .routers import (
    admin_reservations,
    availability,
    reservations,
    schedule,
    venue_settings,
)
from .routers.deps import request_validation_handler

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    tasks: list[asyncio.Task] = []
    if settings.notifications_enabled:
        from .services.notifications.consumer import notification_consumer_loop
        tasks.append(asyncio.create_task(notification_consumer_loop(settings.redis_url)))

    yield

    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)


app = FastAPI(title="Table Reservations API", lifespan=lifespan)
app.add_exception_handler(RequestValidationError, request_validation_handler)

app.include_router(availability.router)
app.include_router(reservations.router)
app.include_router(admin_reservations.router)
app.include_router(schedule.router)
app.include_router(venue_settings.router)


@app.get("/health")
def health():
    db_ok = True
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database unavailable")
        db_ok = False
    finally:
        db.close()

    try:
        redis_ok = bool(redis_client.ping())
    except Exception:
        redis_ok = False

    return {"database": db_ok, "redis": redis_ok}
