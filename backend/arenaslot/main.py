import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .database import SessionLocal, init_db
from .redis_client import get_redis
from .routers import audit_log, bookings, games, slots
from .routers import settings as settings_router
from .services.completion_checker import completion_checker_loop

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()

    checker = None
    redis = get_redis()
    if redis is not None and settings.completion_check_interval > 0:
        checker = asyncio.create_task(
            completion_checker_loop(SessionLocal, redis, settings.completion_check_interval)
        )

    yield

    if checker is not None:
        checker.cancel()
        await asyncio.gather(checker, return_exceptions=True)


app = FastAPI(title="Arena Slot Booking API", lifespan=lifespan)

app.include_router(settings_router.router)
app.include_router(games.router)
app.include_router(slots.router)
app.include_router(bookings.router)
app.include_router(audit_log.router)


@app.get("/health")
def health():
    redis = get_redis()
    return {"redis": redis.ping() if redis is not None else None}
