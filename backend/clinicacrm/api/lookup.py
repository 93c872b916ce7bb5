"""
Screen-pop lookup API.

Call-center software calls this with the inbound caller's number and
receives the matching case, if any:

- GET  /api/lookup?phone=+391234567890
- POST /api/lookup  {"phone": "+391234567890"}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..core.auth import require_permission
from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import ValidationError
from ..models.case import Case
from ..schemas.lookup import LookupCase, LookupPatient, LookupRequest, LookupResponse
from ..services.api_keys import ApiKeyPermission
from ..services.case_lookup import find_case_by_phone
from ..services.phone_matching import country_codes_from_table, digits_only


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/lookup",
    tags=["Screen Pop"],
    dependencies=[Depends(require_permission(ApiKeyPermission.READ))],
)


def screen_pop_url(case_id: int) -> str:
    base = settings.screen_pop_base_url.rstrip("/")
    return f"{base}/{settings.default_locale}/cases/{case_id}"


def _screen_pop(case: Case, phone: str) -> LookupResponse:
    return LookupResponse(
        case_id=case.id,
        patient=LookupPatient(
            name=case.full_name,
            phone=case.phone,
            home_phone=case.home_phone,
            cell_phone=case.cell_phone,
            email=case.email,
        ),
        case=LookupCase(
            status=case.status.value,
            clinic=case.clinic,
            treatment=case.treatment,
            disposition=case.disposition,
            outcome=case.outcome,
            created_at=case.created_at,
            follow_up_date=case.follow_up_date,
        ),
        screen_pop_url=screen_pop_url(case.id),
        phone_searched=phone,
    )


def _lookup(phone: Optional[str], db: Session):
    if not phone or not digits_only(phone):
        raise ValidationError(
            "Phone number is required",
            details={"example": "?phone=+391234567890"},
        )

    case = find_case_by_phone(
        db,
        phone,
        country_codes=country_codes_from_table(settings.phone_country_codes_table),
        suffix_digits=settings.phone_match_suffix_digits,
    )
    if case is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "found": False,
                "message": f"No case found for phone number: {phone}",
                "phone": phone,
            },
        )
    return _screen_pop(case, phone)


@router.get(
    "",
    response_model=LookupResponse,
    summary="Lookup Case by Phone",
    responses={404: {"description": "No case matches the number"}},
)
async def lookup_get(phone: Optional[str] = None, db: Session = Depends(get_db)):
    return _lookup(phone, db)


@router.post(
    "",
    response_model=LookupResponse,
    summary="Lookup Case by Phone (JSON body)",
    responses={404: {"description": "No case matches the number"}},
)
async def lookup_post(body: LookupRequest, db: Session = Depends(get_db)):
    return _lookup(body.phone, db)
