"""
Case API endpoints.

CRUD for clinic cases. Reads need the ``read`` permission, mutations
``write``; dashboard sessions hold both.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.auth import require_permission
from ..core.database import get_db
from ..core.exceptions import NotFoundError, ValidationError
from ..core.transactions import transaction
from ..models.case import Case, CaseChannel, CaseStatus
from ..schemas.case import (
    AuthorProfile,
    CaseCreate,
    CaseDetailResponse,
    CaseFilters,
    CaseResponse,
    CaseUpdate,
)
from ..schemas.common import SuccessResponse
from ..services.api_keys import ApiKeyPermission
from ..services.case_lookup import apply_case_filters, newest_first
from .notes import serialize_note


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cases", tags=["Cases"])

read_access = Depends(require_permission(ApiKeyPermission.READ))
write_access = Depends(require_permission(ApiKeyPermission.WRITE))


def _get_case(db: Session, case_id: int) -> Case:
    case = db.query(Case).filter(Case.id == case_id).first()
    if not case:
        raise NotFoundError("Case not found")
    return case


# =============================================================================
# Read
# =============================================================================

@router.get(
    "",
    response_model=List[CaseResponse],
    summary="List Cases",
    description="List cases, newest first, with optional filters.",
    dependencies=[read_access],
)
async def list_cases(
    db: Session = Depends(get_db),
    search: Optional[str] = None,
    status_filter: Optional[CaseStatus] = Query(default=None, alias="status"),
    channel: Optional[CaseChannel] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> List[CaseResponse]:
    """
    List cases.

    Args:
        search: Case-insensitive match on first or last name
        status_filter: Pipeline status
        channel: Acquisition channel
        date_from / date_to: Inclusive creation date bounds
    """
    filters = CaseFilters(
        search=search,
        status=status_filter,
        channel=channel,
        date_from=date_from,
        date_to=date_to,
    )
    cases = newest_first(apply_case_filters(db.query(Case), filters)).all()
    return [CaseResponse.model_validate(case) for case in cases]


@router.get(
    "/{case_id}",
    response_model=CaseDetailResponse,
    summary="Get Case",
    description="A single case with its notes.",
    dependencies=[read_access],
)
async def get_case(case_id: int, db: Session = Depends(get_db)) -> CaseDetailResponse:
    case = _get_case(db, case_id)
    base = CaseResponse.model_validate(case).model_dump()
    return CaseDetailResponse(
        **base,
        notes=[serialize_note(note) for note in case.notes],
        assigned_user=AuthorProfile.model_validate(case.assigned_user) if case.assigned_user else None,
    )


# =============================================================================
# Write
# =============================================================================

@router.post(
    "",
    response_model=CaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Case",
    dependencies=[write_access],
)
async def create_case(case_data: CaseCreate, db: Session = Depends(get_db)) -> CaseResponse:
    try:
        with transaction(db):
            case = Case(**case_data.model_dump())
            db.add(case)
        db.refresh(case)
    except SQLAlchemyError as e:
        logger.error(f"Error creating case: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create case",
        )

    logger.info(f"Case {case.id} created (channel={case.channel.value})")
    return CaseResponse.model_validate(case)


async def _update_case(case_data: CaseUpdate, db: Session) -> CaseResponse:
    case = _get_case(db, case_data.id)
    changes = case_data.model_dump(exclude_unset=True, exclude={"id"})

    for field in ("first_name", "last_name", "channel", "origin", "status", "clinic"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")

    try:
        with transaction(db):
            for field, value in changes.items():
                setattr(case, field, value)
    except SQLAlchemyError as e:
        logger.error(f"Error updating case {case_data.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update case",
        )

    return CaseResponse.model_validate(case)


@router.put(
    "",
    response_model=CaseResponse,
    summary="Update Case",
    dependencies=[write_access],
)
async def update_case(case_data: CaseUpdate, db: Session = Depends(get_db)) -> CaseResponse:
    """Partial update; fields missing from the body are kept."""
    return await _update_case(case_data, db)


@router.patch(
    "",
    response_model=CaseResponse,
    summary="Patch Case",
    dependencies=[write_access],
)
async def patch_case(case_data: CaseUpdate, db: Session = Depends(get_db)) -> CaseResponse:
    return await _update_case(case_data, db)


@router.delete(
    "",
    response_model=SuccessResponse,
    summary="Delete Case",
    description="Delete a case and its notes.",
    dependencies=[write_access],
)
async def delete_case(
    case_id: Optional[int] = Query(default=None, alias="id"),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    if case_id is None:
        raise ValidationError("Case ID is required")

    case = _get_case(db, case_id)
    try:
        with transaction(db):
            db.delete(case)
    except SQLAlchemyError as e:
        logger.error(f"Error deleting case {case_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete case",
        )

    logger.info(f"Case {case_id} deleted")
    return SuccessResponse(message="Case deleted")
