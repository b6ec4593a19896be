from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from docmate.reading import DocumentLibrary, DocumentNotFoundError, NoteBook, NoteNotFoundError

from api.dependencies import SessionCache, get_library, get_notebook, get_sessions

router = APIRouter(prefix="/notes", tags=["notes"])


class NoteBody(BaseModel):
    content: str
    document_id: Optional[str] = None


class EditNoteBody(BaseModel):
    content: str


@router.get("")
def list_notes(query: str = "", notebook: NoteBook = Depends(get_notebook)):
    return [n.to_dict() for n in notebook.search(query)]


@router.post("", status_code=201)
def add_note(
    body: NoteBody,
    notebook: NoteBook = Depends(get_notebook),
    library: DocumentLibrary = Depends(get_library),
    sessions: SessionCache = Depends(get_sessions),
):
    try:
        if body.document_id:
            note = sessions.get(library, body.document_id).add_note(notebook, body.content)
        else:
            note = notebook.add(body.content)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return note.to_dict()


@router.patch("/{note_id}")
def edit_note(note_id: str, body: EditNoteBody, notebook: NoteBook = Depends(get_notebook)):
    try:
        note = notebook.edit(note_id, body.content)
    except NoteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return note.to_dict()
