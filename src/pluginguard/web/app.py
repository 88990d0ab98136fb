"""FastAPI application factory for the PluginGuard API."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pluginguard import __version__
from pluginguard.config import PluginGuardConfig
from pluginguard.jobs.orchestrator import ScanOrchestrator
from pluginguard.rules.catalog import RuleCatalog
from pluginguard.scanner.engine import ScanEngine
from pluginguard.scanner.walker import CorpusWalker
from pluginguard.sources.local import LocalSourceProvider
from pluginguard.storage.memory import MemoryResultStore
from pluginguard.storage.sqlite import SqliteResultStore

logger = logging.getLogger(__name__)


def create_app(config: PluginGuardConfig | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or PluginGuardConfig.load()
    # Built eagerly so a broken rule file fails at startup, not on first scan
    engine = ScanEngine(
        catalog=RuleCatalog.default(config.rule_files),
        walker=CorpusWalker(max_file_size=config.max_file_size),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if config.store == "sqlite":
            store = await SqliteResultStore.open(config.db_path)
        else:
            store = MemoryResultStore()
        app.state.store = store
        app.state.orchestrator = ScanOrchestrator(
            store=store,
            provider=LocalSourceProvider(config.work_dir),
            engine=engine,
        )
        logger.info("Using %s result store", config.store)
        try:
            yield
        finally:
            await app.state.orchestrator.shutdown()
            if isinstance(store, SqliteResultStore):
                await store.close()

    app = FastAPI(
        title="PluginGuard",
        version=__version__,
        docs_url="/api/docs",
        lifespan=lifespan,
    )
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"])

    # Store config and engine in app state
    app.state.config = config
    app.state.engine = engine

    from pluginguard.web.api.scans import router as scans_router

    app.include_router(scans_router, prefix="/api")

    return app
