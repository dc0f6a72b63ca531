"""Time block management: vacations, breaks, meetings and salon-wide closures."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from salonbook.core.exceptions import BookingValidationError, NotFoundError
from salonbook.models.time_block import TimeBlock, TimeBlockType
from salonbook.repositories.container import Repositories
from salonbook.schemas.time_block import RecurringTimeBlockCreate, TimeBlockCreate
from salonbook.services.recurrence import generate_occurrences, generate_rrule, parse_rrule
from salonbook.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


def _validate_range(start: datetime, end: datetime) -> None:
    if start >= end:
        raise BookingValidationError("Start time must be before end time")


async def _ensure_employee(repos: Repositories, salon_id: UUID, employee_id: Optional[UUID]) -> None:
    if employee_id is None:
        return
    employee = await repos.employees.get(employee_id)
    if employee is None or employee.salon_id != salon_id:
        raise NotFoundError("Employee not found")


async def create_time_block(repos: Repositories, data: TimeBlockCreate) -> TimeBlock:
    _validate_range(data.start_time, data.end_time)
    await _ensure_employee(repos, data.salon_id, data.employee_id)

    block = TimeBlock(
        salon_id=data.salon_id,
        employee_id=data.employee_id,
        start_time=data.start_time,
        end_time=data.end_time,
        reason=data.reason,
        type=data.type,
        is_recurring=False,
    )
    await repos.time_blocks.add(block)
    await repos.commit()
    logger.info(
        "Time block %s (%s) created for %s",
        block.id,
        block.type.value,
        data.employee_id or f"salon {data.salon_id}",
    )
    return block


async def create_recurring_time_block(repos: Repositories, data: RecurringTimeBlockCreate) -> list[TimeBlock]:
    """Create a parent block plus one child per later occurrence of the rule.

    Every child keeps the parent's duration. Returns the parent first.
    """
    _validate_range(data.start_time, data.end_time)
    await _ensure_employee(repos, data.salon_id, data.employee_id)

    rule = parse_rrule(data.recurrence_rule)
    rrule = generate_rrule(rule)
    duration = data.end_time - data.start_time
    occurrences = generate_occurrences(data.start_time, rule)

    parent = TimeBlock(
        salon_id=data.salon_id,
        employee_id=data.employee_id,
        start_time=occurrences[0],
        end_time=occurrences[0] + duration,
        reason=data.reason,
        type=data.type,
        is_recurring=True,
        recurrence_rule=rrule,
    )
    await repos.time_blocks.add(parent)

    blocks = [parent]
    for occurrence in occurrences[1:]:
        child = TimeBlock(
            salon_id=data.salon_id,
            employee_id=data.employee_id,
            start_time=occurrence,
            end_time=occurrence + duration,
            reason=data.reason,
            type=data.type,
            is_recurring=True,
            recurrence_rule=rrule,
            parent_id=parent.id,
        )
        repos.db.add(child)
        blocks.append(child)

    await repos.commit()
    logger.info("Recurring time block %s created with %d occurrences (%s)", parent.id, len(blocks), rrule)
    return blocks


async def get_time_block(repos: Repositories, time_block_id: UUID) -> TimeBlock:
    block = await repos.time_blocks.get(time_block_id)
    if block is None:
        raise NotFoundError("Time block not found")
    return block


async def update_time_block(repos: Repositories, time_block_id: UUID, values: dict) -> TimeBlock:
    block = await get_time_block(repos, time_block_id)
    _validate_range(values.get("start_time") or block.start_time, values.get("end_time") or block.end_time)

    for key, value in values.items():
        setattr(block, key, value)
    await repos.commit()
    return block


async def delete_time_block(repos: Repositories, time_block_id: UUID) -> None:
    """Soft delete; the block stops counting as a conflict immediately."""
    block = await get_time_block(repos, time_block_id)
    block.deleted_at = utcnow()
    await repos.commit()
    logger.info("Time block %s deleted", time_block_id)


async def list_time_blocks(
    repos: Repositories,
    salon_id: UUID,
    employee_id: Optional[UUID] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    block_type: Optional[TimeBlockType] = None,
) -> list[TimeBlock]:
    return list(
        await repos.time_blocks.search(
            salon_id,
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            block_type=block_type,
        )
    )
