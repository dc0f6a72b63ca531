"""Imports every model module so mapper relationships and Base.metadata are complete."""

from salonbook.models.salon import Salon, User, SalonMember  # noqa: F401
from salonbook.models.employee import Employee, EmployeeSchedule, EmployeeService  # noqa: F401
from salonbook.models.service import Service, Client  # noqa: F401
from salonbook.models.appointment import (  # noqa: F401
    Appointment,
    AppointmentService,
    AppointmentAssistant,
    AppointmentRepetition,
)
from salonbook.models.time_block import TimeBlock  # noqa: F401
from salonbook.models.booking_config import BookingConfig  # noqa: F401
from salonbook.models.waiting_list import WaitingListEntry  # noqa: F401
