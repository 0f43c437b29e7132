import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings, assert_secure_configuration, resolve_project_path
from .core.logging import configure_logging
from .core.database import init_database, session_scope
from .api.routes.v1.health import router as health_router
from .api.routes.v1.gpts import router as gpts_router
from .api.routes.v1.showcase import router as showcase_router
from .api.routes.v1.catalog import router as catalog_router
from .repositories.catalog_repository import CatalogRepository
from .repositories.gpt_repository import GptRepository
from .services.gpt_service import GptService


configure_logging(settings.log_level)
log = logging.getLogger("launcher.main")


def seed_catalog() -> int:
    """Load ``GPT_SEED_PATH`` into the store when it holds no GPT yet."""
    if not settings.gpt_seed_path:
        return 0
    catalog = CatalogRepository(Path(resolve_project_path(settings.gpt_seed_path)))
    with session_scope() as session:
        return GptService(GptRepository(session)).seed_if_empty(catalog)


def create_app() -> FastAPI:
    app = FastAPI(title="GPT Launcher API", version="0.1.0")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers v1
    app.include_router(health_router, prefix=f"{settings.api_prefix}/v1", tags=["health"])
    app.include_router(gpts_router, prefix=f"{settings.api_prefix}/v1", tags=["gpts"])
    app.include_router(showcase_router, prefix=f"{settings.api_prefix}/v1", tags=["showcase"])
    app.include_router(catalog_router, prefix=f"{settings.api_prefix}/v1", tags=["catalog"])

    @app.on_event("startup")
    def _startup() -> None:
        # Harden: block unsafe defaults outside development
        assert_secure_configuration()
        init_database()
        seeded = seed_catalog()
        if seeded:
            log.info("Seeded %d GPTs from %s", seeded, settings.gpt_seed_path)

    return app


app = create_app()
