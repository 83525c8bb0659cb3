import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .routers.admin.routes import router as admin_router
from .routers.auth.routes import router as auth_router
from .routers.dashboard.routes import router as dashboard_router
from .routers.leaderboard.routes import router as leaderboard_router
from .routers.schedule.routes import router as schedule_router

log = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


async def _bad_input(request: Request, exc: RequestValidationError) -> JSONResponse:
    log.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "Bad input", "errors": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _bad_input)

    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(leaderboard_router)
    app.include_router(schedule_router)
    app.include_router(admin_router)

    return app


app = create_app()
