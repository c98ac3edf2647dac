"""FastAPI application factory for the CodeEdit review service."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

# Configure root logger so all application logs are visible in server output
logging.basicConfig(
    level=os.environ.get("CODEEDIT_LOG_LEVEL", "INFO"),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
from fastapi.middleware.cors import CORSMiddleware

from codeedit.config import get_config
from codeedit.engine.artifact_store import ArtifactStore
from codeedit.engine.checklist_store import ChecklistStore

logger = logging.getLogger("api")

VERSION = "0.1.0"


def create_app(
    repo_root: Path | None = None,
    artifact_store: ArtifactStore | None = None,
    checklist_store: ChecklistStore | None = None,
    max_results: int | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    All dependencies are injectable for testing. When called with no
    arguments, the repository root comes from the configuration.

    Args:
        repo_root: Repository to serve (defaults to ``CODEEDIT_REPO_ROOT``/cwd).
        artifact_store: Injected artifact store (creates default if None).
        checklist_store: Injected checklist store (creates default if None).
        max_results: Search result cap (defaults to configuration).

    Returns:
        Configured FastAPI instance.
    """
    cfg = get_config()
    root = (repo_root or Path(cfg.repo_root)).resolve()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan -- log what is being served."""
        logger.info("CodeEdit API v%s serving %s", VERSION, app.state.repo_root)
        logger.info("Checklist file: %s", app.state.checklist.path)
        yield
        logger.info("Shutting down CodeEdit API")

    app = FastAPI(
        title="CodeEdit Review API",
        description="Search, versioned file access and review checklist for a repository.",
        version=VERSION,
        lifespan=lifespan,
    )

    # ── Shared state ──────────────────────────────────────────────────
    app.state.repo_root = root
    app.state.artifacts = artifact_store or ArtifactStore(root)
    app.state.checklist = checklist_store or ChecklistStore(root)
    app.state.max_results = max_results if max_results is not None else cfg.max_results

    # ── CORS ──────────────────────────────────────────────────────────
    allowed_origins = [o.strip() for o in cfg.allowed_origins if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────
    from codeedit.api.routes.health import router as health_router
    from codeedit.api.routes.search import router as search_router
    from codeedit.api.routes.files import router as files_router
    from codeedit.api.routes.checklist import router as checklist_router

    app.include_router(health_router)
    app.include_router(search_router)
    app.include_router(files_router)
    app.include_router(checklist_router)

    return app
