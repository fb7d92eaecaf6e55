import redis.asyncio as aioredis
import uvicorn
from fastapi import FastAPI

from roster.config import (
    ADMIN_PIN,
    API_PREFIX,
    APP_HOST,
    APP_PORT,
    PIN_SALT,
    REDIS_URL,
    TEAM_ID,
    TITLE,
)
from roster.middlewares.logging import JsonLoggingMiddleware, logger
from roster.repositories.player import make_player_repository
from roster.routers.status import make_status_router
from roster.services.status import make_status_service


async def lifespan(app: FastAPI):
    redis_client = aioredis.from_url(REDIS_URL, decode_responses=True)
    app.state.redis = redis_client

    if not ADMIN_PIN or not PIN_SALT:
        logger.warning("ADMIN_PIN or PIN_SALT is not set: add/remove will fail")

    player_repo = make_player_repository(redis_client, TEAM_ID)
    status_service = make_status_service(
        player_repository=player_repo,
        pin_salt=PIN_SALT,
        admin_pin=ADMIN_PIN,
    )

    status_router = make_status_router(status_service)
    app.include_router(status_router, prefix=API_PREFIX)

    try:
        yield
    finally:
        await redis_client.aclose()


def make_app() -> FastAPI:
    app = FastAPI(title=TITLE, lifespan=lifespan)
    app.add_middleware(JsonLoggingMiddleware)

    @app.get("/health")
    async def health():
        try:
            await app.state.redis.ping()
            return {"status": "ok"}
        except Exception:
            return {"status": "fail"}

    return app


app = make_app()


if __name__ == "__main__":
    uvicorn.run(app, host=APP_HOST, port=APP_PORT, reload=False)
