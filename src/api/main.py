import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import ops, smart, todos
from api.state import Services, build_services
from storage import db
from storage.todo_store import PostgresTodoStore

# Logging configuration
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

INIT_SCHEMA = os.getenv("INIT_SCHEMA", "true").lower() in {"1", "true", "yes"}
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Build the API around one set of services (built from the environment if not given)."""
    app = FastAPI(title="Smart Todo API")
    app.state.services = services or build_services()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(todos.router, prefix="/api")
    app.include_router(smart.router, prefix="/api")
    app.include_router(ops.router)

    @app.on_event("startup")
    async def startup() -> None:
        if isinstance(app.state.services.store, PostgresTodoStore):
            await db.init_db_pool()
            if INIT_SCHEMA:
                await db.init_schema()
        logger.info(f"Todo API started (store: {app.state.services.store.name})")

    @app.on_event("shutdown")
    async def shutdown() -> None:
        if isinstance(app.state.services.store, PostgresTodoStore):
            await db.close_db_pool()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
