from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.approval_history.router import router as approval_history_router
from app.api.v1.auth.router import router as auth_router
from app.api.v1.departments.department_router import router as departments_router
from app.api.v1.outings.router import router as outings_router
from app.api.v1.profiles.router import router as profiles_router
from app.api.v1.rooms.router import router as rooms_router
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Hostel Outing Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(profiles_router)
    app.include_router(departments_router)
    app.include_router(rooms_router)
    app.include_router(outings_router)
    app.include_router(approval_history_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
