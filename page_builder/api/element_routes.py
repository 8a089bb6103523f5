"""
Element Routes
===============

API routes for element management.
"""

from fastapi import APIRouter, HTTPException
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ..models.page_models import LayoutRect, MarqueeBox, ZDirection

router = APIRouter(prefix="/api/element", tags=["elements"])

# Injected by server
editor_manager = None


class ElementRequest(BaseModel):
    """Request to add an element."""
    type: str
    content: Dict[str, Any] = Field(default_factory=dict)
    section_id: Optional[str] = None
    external_id: Optional[str] = None


class ElementResponse(BaseModel):
    """Response for element operations."""
    element_id: str
    message: str
    layout: Optional[Dict[str, Any]] = None


class ContentRequest(BaseModel):
    content: Dict[str, Any]


class MoveRequest(BaseModel):
    """Percent delta applied to the element (and its selection group)."""
    dx: float = 0
    dy: float = 0


class ResizeRequest(BaseModel):
    w: float
    h: float
    x: Optional[float] = None
    y: Optional[float] = None


class ZIndexRequest(BaseModel):
    direction: ZDirection


class SelectRequest(BaseModel):
    ids: List[str] = Field(default_factory=list)


class MarqueeRequest(BaseModel):
    """Marquee box in pixels relative to the section."""
    section_id: str
    start_x: float
    start_y: float
    end_x: float
    end_y: float


async def _editor(page_id: str):
    if not editor_manager:
        raise HTTPException(status_code=500, detail="Editor manager not initialized")
    return await editor_manager.get_editor(page_id)


def _require_element(editor, element_id: str):
    element = editor.page_data.get_element(element_id)
    if element is None:
        raise HTTPException(status_code=404, detail="Element not found")
    return element


@router.post("/{page_id}")
async def add_element(page_id: str, request: ElementRequest) -> ElementResponse:
    """Add element to the page."""
    editor = await _editor(page_id)
    element_id = editor.add_element(
        request.type, request.content, request.section_id, request.external_id
    )
    if element_id is None:
        raise HTTPException(status_code=404, detail="Section not found")
    element = editor.page_data.get_element(element_id)
    return ElementResponse(
        element_id=element_id,
        message="Element added",
        layout=element.layout.model_dump(by_alias=True, exclude_none=True),
    )


@router.put("/{page_id}/{element_id}/content")
async def update_content(page_id: str, element_id: str, request: ContentRequest) -> ElementResponse:
    editor = await _editor(page_id)
    _require_element(editor, element_id)
    editor.update_element_content(element_id, request.content)
    return ElementResponse(element_id=element_id, message="Content updated")


@router.put("/{page_id}/{element_id}/layout")
async def update_layout(page_id: str, element_id: str, request: LayoutRect) -> ElementResponse:
    """Commit a rect for the active breakpoint."""
    editor = await _editor(page_id)
    _require_element(editor, element_id)
    editor.update_layout(element_id, request)
    return ElementResponse(element_id=element_id, message="Layout updated", layout=request.model_dump())


@router.post("/{page_id}/{element_id}/move")
async def move_element(page_id: str, element_id: str, request: MoveRequest) -> ElementResponse:
    editor = await _editor(page_id)
    _require_element(editor, element_id)
    rect = editor.move_element(element_id, request.dx, request.dy)
    return ElementResponse(element_id=element_id, message="Element moved", layout=rect.model_dump())


@router.post("/{page_id}/{element_id}/resize")
async def resize_element(page_id: str, element_id: str, request: ResizeRequest) -> ElementResponse:
    editor = await _editor(page_id)
    _require_element(editor, element_id)
    rect = editor.resize_element(element_id, request.w, request.h, request.x, request.y)
    return ElementResponse(element_id=element_id, message="Element resized", layout=rect.model_dump())


@router.post("/{page_id}/{element_id}/z-index")
async def update_z_index(page_id: str, element_id: str, request: ZIndexRequest):
    editor = await _editor(page_id)
    _require_element(editor, element_id)
    editor.update_z_index(element_id, request.direction)
    return {"element_id": element_id, "z_index": editor.page_data.get_element(element_id).z_index}


@router.delete("/{page_id}/{element_id}")
async def remove_element(page_id: str, element_id: str):
    """Remove element from the page."""
    editor = await _editor(page_id)
    _require_element(editor, element_id)
    editor.delete_element(element_id)
    return {"message": "Element removed", "element_id": element_id}


@router.post("/{page_id}/select")
async def select_elements(page_id: str, request: SelectRequest):
    editor = await _editor(page_id)
    return {"selected_ids": editor.select_elements(request.ids)}


@router.post("/{page_id}/marquee")
async def marquee_select(page_id: str, request: MarqueeRequest):
    """Select every element of a section touched by a marquee box."""
    editor = await _editor(page_id)
    if editor.page_data.get_section(request.section_id) is None:
        raise HTTPException(status_code=404, detail="Section not found")
    box = MarqueeBox(request.start_x, request.start_y, request.end_x, request.end_y)
    return {"selected_ids": editor.marquee_select(request.section_id, box)}
