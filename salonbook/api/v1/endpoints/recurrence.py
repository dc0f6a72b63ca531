"""Recurrence helpers: preview a rule and convert it to and from RRULE text."""

from fastapi import APIRouter, Depends

from salonbook.core.deps import get_current_user
from salonbook.models.salon import User
from salonbook.schemas.recurrence import (
    ExpandRecurrenceRequest,
    ExpandRecurrenceResponse,
    RRuleParseRequest,
    RRuleRequest,
    RRuleResponse,
)
from salonbook.services.recurrence import (
    generate_occurrences,
    generate_rrule,
    get_recurrence_summary,
    parse_rrule,
)

router = APIRouter()


@router.post("/expand", response_model=ExpandRecurrenceResponse)
async def expand_rule(request: ExpandRecurrenceRequest, current_user: User = Depends(get_current_user)):
    """List the dates a series would occupy before booking it."""
    occurrences = generate_occurrences(request.start, request.rule, request.max_occurrences)
    return ExpandRecurrenceResponse(
        rrule=generate_rrule(request.rule),
        summary=get_recurrence_summary(request.rule),
        occurrences=occurrences,
    )


@router.post("/rrule", response_model=RRuleResponse)
async def to_rrule(request: RRuleRequest, current_user: User = Depends(get_current_user)):
    return RRuleResponse(
        rrule=generate_rrule(request.rule),
        rule=request.rule,
        summary=get_recurrence_summary(request.rule),
    )


@router.post("/parse", response_model=RRuleResponse)
async def from_rrule(request: RRuleParseRequest, current_user: User = Depends(get_current_user)):
    rule = parse_rrule(request.rrule)
    return RRuleResponse(rrule=generate_rrule(rule), rule=rule, summary=get_recurrence_summary(rule))
