# modcatalog/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from . import config
from .catalog.router import router as catalog_router
from .catalog.session import CatalogState
from .catalog.store import ModStore
from .storage import DownloadLedger, LocalStorage

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    store: Optional[ModStore] = None,
    storage: Optional[LocalStorage] = None,
) -> FastAPI:
    """Build the service around a store and a local storage file.

    Both default to the files named in ``modcatalog.config``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        catalog = CatalogState(
            store if store is not None else ModStore.from_file(config.DATA_FILE),
            DownloadLedger(storage if storage is not None else LocalStorage(config.STORAGE_FILE)),
        )
        catalog.start()
        app.state.catalog = catalog
        logger.info("Catalogue ready with %d mods", len(catalog.collection))
        try:
            yield
        finally:
            catalog.close()

    app = FastAPI(
        title="Mod Catalogue",
        description=(
            "Browse a catalogue of mods by free-text search and tag "
            "intersection, with the view state carried in shareable URLs."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # 🔹 Health check
    @app.get("/")
    def health_check():
        return {"status": "ok", "message": "Mod catalogue live"}

    app.include_router(catalog_router)
    return app


app = create_app()
