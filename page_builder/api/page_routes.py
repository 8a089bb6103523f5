"""
Page Routes
===========

API routes for page state, history and persistence.
"""

from fastapi import APIRouter, HTTPException
from typing import Any, Dict
from pydantic import BaseModel

from ..models.page_models import Breakpoint
from ..layout.live_view import live_elements, render_live_css

router = APIRouter(prefix="/api/pages", tags=["pages"])

# Injected by server
editor_manager = None


class BreakpointRequest(BaseModel):
    """Request to switch the active breakpoint."""
    breakpoint: Breakpoint


class GridRequest(BaseModel):
    show_grid: bool


class PageStateResponse(BaseModel):
    """Editor state for a page."""
    page: Dict[str, Any]
    breakpoint: Breakpoint
    selected_ids: list
    show_grid: bool
    is_dirty: bool
    can_undo: bool
    can_redo: bool
    total_height: float


async def _editor(page_id: str):
    if not editor_manager:
        raise HTTPException(status_code=500, detail="Editor manager not initialized")
    return await editor_manager.get_editor(page_id)


@router.get("/{page_id}")
async def get_page(page_id: str) -> PageStateResponse:
    """Get editor state for a page (opens it on first use)."""
    editor = await _editor(page_id)
    return PageStateResponse(**editor.snapshot())


@router.post("/{page_id}/save")
async def save_page(page_id: str):
    """Save the page now."""
    editor = await _editor(page_id)
    saved = await editor.save()
    return {"saved": saved, "is_dirty": editor.is_dirty, "page_id": page_id}


@router.post("/{page_id}/undo")
async def undo(page_id: str) -> PageStateResponse:
    editor = await _editor(page_id)
    editor.undo()
    return PageStateResponse(**editor.snapshot())


@router.post("/{page_id}/redo")
async def redo(page_id: str) -> PageStateResponse:
    editor = await _editor(page_id)
    editor.redo()
    return PageStateResponse(**editor.snapshot())


@router.put("/{page_id}/breakpoint")
async def set_breakpoint(page_id: str, request: BreakpointRequest) -> PageStateResponse:
    editor = await _editor(page_id)
    editor.set_breakpoint(request.breakpoint)
    return PageStateResponse(**editor.snapshot())


@router.put("/{page_id}/grid")
async def set_grid(page_id: str, request: GridRequest) -> PageStateResponse:
    """Show or hide the grid overlay."""
    editor = await _editor(page_id)
    editor.set_show_grid(request.show_grid)
    return PageStateResponse(**editor.snapshot())


@router.get("/{page_id}/live")
async def live_view(page_id: str, breakpoint: Breakpoint = Breakpoint.DESKTOP):
    """Positioned elements and responsive CSS for rendering the live page."""
    editor = await _editor(page_id)
    data = editor.page_data
    return {
        "page_id": page_id,
        "breakpoint": breakpoint.value,
        "total_height": editor.total_height,
        "css": render_live_css(data, editor.config.breakpoints),
        "elements": live_elements(data, breakpoint),
    }


@router.post("/{page_id}/close")
async def close_page(page_id: str):
    """Close the page's editor, saving unsaved changes."""
    if not editor_manager:
        raise HTTPException(status_code=500, detail="Editor manager not initialized")
    if not await editor_manager.close_page(page_id):
        raise HTTPException(status_code=404, detail="Page not open")
    return {"message": "Page closed", "page_id": page_id}


@router.delete("/{page_id}")
async def delete_page(page_id: str):
    """Delete a page from storage."""
    if not editor_manager:
        raise HTTPException(status_code=500, detail="Editor manager not initialized")
    if not await editor_manager.delete_page(page_id):
        raise HTTPException(status_code=500, detail="Page could not be deleted")
    return {"message": "Page deleted", "page_id": page_id}
