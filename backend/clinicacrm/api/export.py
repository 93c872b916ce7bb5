"""
CSV export of filtered cases.
"""

import csv
import io
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..core.auth import require_permission
from ..core.database import get_db
from ..models.case import Case
from ..schemas.case import ExportRequest
from ..services.api_keys import ApiKeyPermission
from ..services.case_lookup import apply_case_filters, newest_first


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/export", tags=["Export"])

CSV_HEADERS = [
    "ID",
    "First Name",
    "Last Name",
    "Phone",
    "Email",
    "Channel",
    "Origin",
    "Status",
    "Outcome",
    "Clinic",
    "Treatment",
    "Promotion",
    "Created At",
    "Follow Up Date",
    "Assigned To",
    "Dialer Campaign Tag",
]


def _iso(value) -> str:
    return value.isoformat() if value else ""


def case_row(case: Case) -> list:
    return [
        case.id,
        case.first_name,
        case.last_name,
        case.phone or "",
        case.email or "",
        case.channel.value,
        case.origin,
        case.status.value,
        case.outcome or "",
        case.clinic,
        case.treatment or "",
        case.promotion or "",
        _iso(case.created_at),
        _iso(case.follow_up_date),
        case.assigned_user.full_name if case.assigned_user else "",
        case.dialer_campaign_tag or "",
    ]


def render_csv(cases) -> str:
    """Every cell quoted, one row per case, header first."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for case in cases:
        writer.writerow(case_row(case))
    return buffer.getvalue()


@router.post(
    "",
    summary="Export Cases as CSV",
    response_class=Response,
    dependencies=[Depends(require_permission(ApiKeyPermission.READ))],
)
async def export_cases(body: ExportRequest, db: Session = Depends(get_db)) -> Response:
    cases = newest_first(apply_case_filters(db.query(Case), body.filters, search_email=True)).all()
    filename = f"cases-export-{datetime.now(timezone.utc).date().isoformat()}.csv"

    logger.info(f"Exporting {len(cases)} cases")
    return Response(
        content=render_csv(cases),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
