"""
Outbound dialer feed.

Returns the cases tagged for a campaign as (record_id, E.164 number) pairs.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import require_permission
from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import ValidationError
from ..schemas.case import DialerLead, DialerRequest, DialerResponse
from ..services.api_keys import ApiKeyPermission
from ..services.case_lookup import dialer_leads


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dialer", tags=["Dialer"])


@router.post(
    "",
    response_model=DialerResponse,
    summary="Leads for Dialer Campaign",
    dependencies=[Depends(require_permission(ApiKeyPermission.READ))],
)
async def leads_for_dialer(body: DialerRequest, db: Session = Depends(get_db)) -> DialerResponse:
    tag = (body.campaign_tag_filter or "").strip()
    if not tag:
        raise ValidationError("campaign_tag_filter is required")

    table = settings.phone_country_codes_table
    default_code = table[0][0] if table else "39"
    leads = [DialerLead(**lead) for lead in dialer_leads(db, tag, default_code)]

    logger.info(f"Dialer feed for campaign '{tag}': {len(leads)} leads")
    return DialerResponse(leads=leads, count=len(leads))
