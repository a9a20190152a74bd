import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from .core.config import settings
from .core.cors import setup_cors
from .core.log import setup_logging
from .core.redis_manager import close_redis
from .domain.errors import InvalidInputError, NotFoundError, SessionStateError
from .api.v1.routers import attempts as attempts_router
from .api.v1.routers import quizzes as quizzes_router
from .api.v1.routers import users as users_router
from .api.v1.routers import play

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_redis()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
setup_cors(app)

app.include_router(quizzes_router.router, prefix=settings.API_V1_PREFIX)
app.include_router(attempts_router.router, prefix=settings.API_V1_PREFIX)
app.include_router(users_router.router, prefix=settings.API_V1_PREFIX)

app.include_router(play.play_router)


@app.exception_handler(InvalidInputError)
@app.exception_handler(SessionStateError)
async def bad_request_handler(request: Request, exc: Exception):
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
