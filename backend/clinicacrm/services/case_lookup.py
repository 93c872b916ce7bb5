"""
Case queries shared by the case list, CSV export, dialer and screen-pop lookup.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import desc, or_
from sqlalchemy.orm import Query, Session

from ..models.case import Case
from ..schemas.case import CaseFilters
from .phone_matching import (
    DEFAULT_COUNTRY_CODES,
    CountryCallingCode,
    digits_only,
    find_first_match,
    suffix_pattern,
    to_e164,
    variations,
)


logger = logging.getLogger(__name__)

PHONE_COLUMNS = (Case.phone, Case.home_phone, Case.cell_phone)


def apply_case_filters(query: Query, filters: CaseFilters, search_email: bool = False) -> Query:
    """
    Apply dashboard filters to a case query.

    ``search`` matches first/last name (and email for exports), case
    insensitive. Date bounds are inclusive.
    """
    if filters.search:
        term = f"%{filters.search.strip()}%"
        clauses = [Case.first_name.ilike(term), Case.last_name.ilike(term)]
        if search_email:
            clauses.append(Case.email.ilike(term))
        query = query.filter(or_(*clauses))
    if filters.status:
        query = query.filter(Case.status == filters.status)
    if filters.channel:
        query = query.filter(Case.channel == filters.channel)
    if filters.assigned_to:
        query = query.filter(Case.assigned_to == filters.assigned_to)
    if filters.date_from:
        query = query.filter(Case.created_at >= filters.date_from)
    if filters.date_to:
        query = query.filter(Case.created_at <= filters.date_to)
    return query


def newest_first(query: Query) -> Query:
    """Most recent case first; ``id`` breaks ties between equal timestamps."""
    return query.order_by(desc(Case.created_at), desc(Case.id))


# =============================================================================
# Screen-pop lookup
# =============================================================================

def lookup_candidates(
    db: Session,
    phone: str,
    country_codes: Sequence[CountryCallingCode] = DEFAULT_COUNTRY_CODES,
    suffix_digits: int = 7,
) -> List[Case]:
    """
    Broad first pass: cases whose phone fields end with the same digits
    (any separators) or equal one of the number's variations.
    """
    pattern = suffix_pattern(phone, suffix_digits)
    forms = sorted(variations(phone, country_codes))

    clauses = []
    for column in PHONE_COLUMNS:
        if pattern:
            clauses.append(column.like(pattern))
        if forms:
            clauses.append(column.in_(forms))
    if not clauses:
        return []

    return newest_first(db.query(Case).filter(or_(*clauses))).all()


def find_case_by_phone(
    db: Session,
    phone: str,
    country_codes: Sequence[CountryCallingCode] = DEFAULT_COUNTRY_CODES,
    suffix_digits: int = 7,
) -> Optional[Case]:
    """
    Two-phase lookup: broad candidate query, then strict normalized match.

    Returns the most recently created matching case, or None.
    """
    candidates = lookup_candidates(db, phone, country_codes, suffix_digits)
    found = find_first_match(phone, candidates)
    logger.info(
        f"Phone lookup: {len(digits_only(phone))} digits, "
        f"{len(candidates)} candidates, match={found.id if found else None}"
    )
    return found


# =============================================================================
# Dialer feed
# =============================================================================

def dialer_leads(db: Session, campaign_tag: str, default_code: str = "39") -> List[dict]:
    """
    Cases tagged for a dialer campaign with a dialable number.

    The first non-empty of phone, cell_phone, home_phone is converted to
    E.164; cases without any usable number are skipped.
    """
    cases = (
        db.query(Case)
        .filter(Case.dialer_campaign_tag == campaign_tag)
        .order_by(Case.id)
        .all()
    )

    leads = []
    for case in cases:
        for raw in (case.phone, case.cell_phone, case.home_phone):
            e164 = to_e164(raw, default_code)
            if e164:
                leads.append({"record_id": case.id, "phone_e164": e164})
                break
    return leads
