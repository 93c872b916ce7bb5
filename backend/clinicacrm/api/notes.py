"""
Case Notes API endpoints.

Notes can be listed by anyone allowed to read the case; only the author
may edit or delete a note. API key callers act as the key's owner.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.auth import Principal, require_permission
from ..core.database import get_db
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.security import sanitize_string
from ..core.transactions import transaction
from ..models.case import Case
from ..models.note import Note
from ..schemas.case import AuthorProfile, NoteCreate, NoteResponse, NoteUpdate
from ..schemas.common import SuccessResponse
from ..services.api_keys import ApiKeyPermission


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["Case Notes"])


def serialize_note(note: Note) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        created_at=note.created_at,
        case_id=note.case_id,
        user_id=note.user_id,
        content=note.content,
        profiles=AuthorProfile.model_validate(note.author) if note.author else None,
    )


def _author_id(principal: Principal):
    if principal.user_id is None:
        raise AuthorizationError(
            "Notes require a user session or a user-owned API key",
            forbidden=True,
        )
    return principal.user_id


def _own_note(db: Session, note_id: int, principal: Principal) -> Note:
    note = db.query(Note).filter(
        Note.id == note_id,
        Note.user_id == _author_id(principal),
    ).first()
    if not note:
        raise NotFoundError("Note not found or access denied")
    return note


# =============================================================================
# Endpoints
# =============================================================================

@router.get(
    "",
    response_model=List[NoteResponse],
    summary="Get Case Notes",
    description="Get all notes for a case in reverse chronological order.",
)
async def list_notes(
    case_id: Optional[int] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(ApiKeyPermission.READ)),
) -> List[NoteResponse]:
    """Notes for ``?case_id=``, newest first."""
    if case_id is None:
        raise ValidationError("Case ID is required")

    notes = (
        db.query(Note)
        .filter(Note.case_id == case_id)
        .order_by(desc(Note.created_at), desc(Note.id))
        .all()
    )
    return [serialize_note(note) for note in notes]


@router.post(
    "",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Case Note",
)
async def create_note(
    note_data: NoteCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(ApiKeyPermission.WRITE)),
) -> NoteResponse:
    """Create a note on a case, authored by the caller."""
    author_id = _author_id(principal)
    content = sanitize_string(note_data.content, max_length=5000)
    if not content:
        raise ValidationError("Case ID and content are required")

    case = db.query(Case).filter(Case.id == note_data.case_id).first()
    if not case:
        raise NotFoundError("Case not found")

    try:
        with transaction(db):
            note = Note(case_id=case.id, user_id=author_id, content=content)
            db.add(note)
        db.refresh(note)
    except SQLAlchemyError as e:
        logger.error(f"Error creating note for case {note_data.case_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create note",
        )

    return serialize_note(note)


@router.put(
    "",
    response_model=NoteResponse,
    summary="Edit Case Note",
)
async def update_note(
    note_data: NoteUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(ApiKeyPermission.WRITE)),
) -> NoteResponse:
    """Replace the content of one of the caller's notes."""
    content = sanitize_string(note_data.content, max_length=5000)
    if not content:
        raise ValidationError("Note ID and content are required")

    note = _own_note(db, note_data.id, principal)
    try:
        with transaction(db):
            note.content = content
    except SQLAlchemyError as e:
        logger.error(f"Error updating note {note_data.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update note",
        )

    return serialize_note(note)


@router.delete(
    "",
    response_model=SuccessResponse,
    summary="Delete Case Note",
)
async def delete_note(
    note_id: Optional[int] = Query(default=None, alias="id"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(ApiKeyPermission.WRITE)),
) -> SuccessResponse:
    """Delete one of the caller's notes (``?id=``)."""
    if note_id is None:
        raise ValidationError("Note ID is required")

    note = _own_note(db, note_id, principal)
    try:
        with transaction(db):
            db.delete(note)
    except SQLAlchemyError as e:
        logger.error(f"Error deleting note {note_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete note",
        )

    return SuccessResponse(message="Note deleted")
