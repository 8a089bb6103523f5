"""
Section Routes
===============

API routes for section management.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

router = APIRouter(prefix="/api/section", tags=["sections"])

# Injected by server
editor_manager = None


class SectionRequest(BaseModel):
    full_width: bool = False


class HeightRequest(BaseModel):
    height: float = Field(gt=0)


class FullWidthRequest(BaseModel):
    full_width: bool


class WidthRequest(BaseModel):
    width: float = Field(gt=0)


async def _editor(page_id: str):
    if not editor_manager:
        raise HTTPException(status_code=500, detail="Editor manager not initialized")
    return await editor_manager.get_editor(page_id)


def _section_response(editor, section_id: str, message: str):
    section = editor.page_data.get_section(section_id)
    if section is None:
        raise HTTPException(status_code=404, detail="Section not found")
    return {
        "message": message,
        "section": section.model_dump(by_alias=True, exclude_none=True),
        "total_height": editor.total_height,
    }


@router.post("/{page_id}")
async def add_section(page_id: str, request: SectionRequest):
    editor = await _editor(page_id)
    section_id = editor.add_section(request.full_width)
    return _section_response(editor, section_id, "Section added")


@router.delete("/{page_id}/{section_id}")
async def delete_section(page_id: str, section_id: str):
    editor = await _editor(page_id)
    if editor.page_data.get_section(section_id) is None:
        raise HTTPException(status_code=404, detail="Section not found")
    editor.delete_section(section_id)
    return {"message": "Section removed", "section_id": section_id, "total_height": editor.total_height}


@router.put("/{page_id}/{section_id}/height")
async def update_height(page_id: str, section_id: str, request: HeightRequest):
    editor = await _editor(page_id)
    editor.update_section_height(section_id, request.height)
    return _section_response(editor, section_id, "Section height updated")


@router.put("/{page_id}/{section_id}/full-width")
async def update_full_width(page_id: str, section_id: str, request: FullWidthRequest):
    editor = await _editor(page_id)
    editor.update_section_full_width(section_id, request.full_width)
    return _section_response(editor, section_id, "Section width mode updated")


@router.put("/{page_id}/{section_id}/width")
async def update_width(page_id: str, section_id: str, request: WidthRequest):
    editor = await _editor(page_id)
    editor.update_section_width(section_id, request.width)
    return _section_response(editor, section_id, "Section width updated")
