"""Scheduling fault types.

Three categories reach callers: validation faults (bad input, rejected before
storage is touched), authorization faults, and write-time conflicts. Conflict
*checks* never raise; they return a ConflictResult. The handlers at the
bottom translate each fault into an HTTP response.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SchedulingError(Exception):
    """Base class for every fault raised by the scheduling engine."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message}


class BookingValidationError(SchedulingError):
    """Malformed input: start >= end, bad slot interval, unknown service..."""


class RecurrenceValidationError(BookingValidationError):
    """Recurrence rule or RRULE string rejected."""


class InvalidStatusTransition(BookingValidationError):
    """A state machine refused the requested transition."""


class DuplicateWaitingListEntry(BookingValidationError):
    """The client already has a WAITING entry for the salon."""


class AuthorizationError(SchedulingError):
    status_code = 403


class NotFoundError(SchedulingError):
    status_code = 404


class OfferExpiredError(SchedulingError):
    """A waiting-list offer was accepted after its expiry."""

    status_code = 410


class AppointmentConflictError(SchedulingError):
    """A booking write hit a scheduling conflict.

    Carries the ConflictResult and the alternative slot starts so the caller
    can offer another time.
    """

    status_code = 409

    def __init__(self, conflict, alternatives: Optional[list] = None):
        super().__init__(conflict.message or "Scheduling conflict detected")
        self.conflict = conflict
        self.alternatives = alternatives or []

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": self.message,
            "conflict": self.conflict.model_dump(mode="json"),
            "alternatives": [slot.isoformat() for slot in self.alternatives],
        }


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    if exc.status_code >= 403:
        logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SchedulingError, scheduling_error_handler)
