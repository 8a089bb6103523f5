"""
Page Builder Server
===================

FastAPI server exposing the headless page editor.

Features:
- Element and section editing on a snapping grid
- Undo/redo history with optional persistence
- Debounced auto-save with optimistic updates
- JSON file or remote HTTP page storage
"""

import os
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

from .models.config_models import PageBuilderConfig
from .models.page_models import Breakpoint
from .canvas.editor_manager import EditorManager
from .services.storage import JsonFileStorage
from .services.http_storage import HttpStorage

# Import API routers
from .api import page_routes, element_routes, section_routes


# Shared service instances
editor_manager: EditorManager = None
config: PageBuilderConfig = None


def create_storage():
    """Remote storage when PAGE_STORAGE_URL is set, JSON files otherwise."""
    storage_url = os.getenv("PAGE_STORAGE_URL")
    if storage_url:
        return HttpStorage(base_url=storage_url, timeout=30.0)
    pages_dir = Path(os.getenv("PAGE_BUILDER_PAGES_DIR", Path(__file__).parent.parent / "pages"))
    return JsonFileStorage(pages_dir=pages_dir)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global editor_manager, config

    logger.info("[PAGE-BUILDER] Starting up...")

    config = PageBuilderConfig.from_env()
    editor_manager = EditorManager(create_storage(), config)

    # Inject into route modules
    page_routes.editor_manager = editor_manager
    element_routes.editor_manager = editor_manager
    section_routes.editor_manager = editor_manager

    logger.info("[PAGE-BUILDER] Services initialized")

    yield

    # Cleanup
    logger.info("[PAGE-BUILDER] Shutting down...")
    if editor_manager:
        await editor_manager.close_all()


# Create FastAPI app
app = FastAPI(
    title="Page Builder",
    description="Headless page composition editor with grid placement and undo/redo",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(page_routes.router)
app.include_router(element_routes.router)
app.include_router(section_routes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "page-builder",
        "storage": os.getenv("PAGE_STORAGE_URL", "local"),
    }


@app.get("/api/info")
async def api_info():
    """Get editor configuration."""
    current = config or PageBuilderConfig()
    return {
        "service": "Page Builder",
        "version": "1.0.0",
        "breakpoints": {bp.value: current.canvas_width(bp) for bp in Breakpoint},
        "grid": {
            "size_px": current.grid_size,
            "columns": current.grid_columns,
            "row_height_px": current.grid_row_height,
        },
        "sections": {
            "default_height": current.default_section_height,
            "max_width": current.max_section_width,
        },
        "auto_save_delay": current.auto_save_delay,
        "max_history_size": current.max_history_size,
        "persist_history": current.persist_history,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "page_builder.server:app",
        host="0.0.0.0",
        port=8080,
        reload=True
    )
