# taskboard/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from taskboard.database import init_db
from taskboard.routers import (
    audit_log_router,
    board_member_router,
    board_router,
    client_user_router,
    invitation_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app(initialize_db: bool = True) -> FastAPI:
    app = FastAPI(
        title="Taskboard Access Service",
        version="0.1.0",
        lifespan=lifespan if initialize_db else None,
    )

    app.include_router(client_user_router.router)
    app.include_router(board_router.router)
    app.include_router(board_member_router.router)
    app.include_router(invitation_router.board_invitations_router)
    app.include_router(invitation_router.router)
    app.include_router(audit_log_router.router)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
