"""Appointment slot allocation.

Pure functions over in-memory inputs: a doctor's availability descriptor, the
set of start times already booked for a day, and an optional requested time.
Times of day are plain ints (minutes since midnight, 0..1439).
"""
import re
from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum

SLOT_MINUTES = 10
MINUTES_PER_DAY = 24 * 60

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2}) (AM|PM)$")
_WINDOW_SEPARATOR = " - "


class MalformedTimeString(ValueError):
    """Raised when a clock or window string does not match `H:MM AM|PM`."""


class AllocationFailure(str, Enum):
    PAST_DATE_REJECTED = "past_date_rejected"
    DOCTOR_UNAVAILABLE = "doctor_unavailable"
    NO_AVAILABILITY_CONFIGURED = "no_availability_configured"
    OUTSIDE_AVAILABILITY = "outside_availability"
    SLOT_ALREADY_BOOKED = "slot_already_booked"
    SLOTS_FULL = "slots_full"


FAILURE_MESSAGES: dict[AllocationFailure, str] = {
    AllocationFailure.PAST_DATE_REJECTED: "Cannot book an appointment for a past date",
    AllocationFailure.DOCTOR_UNAVAILABLE: "Doctor not available on {day}. Available days: {days}",
    AllocationFailure.NO_AVAILABILITY_CONFIGURED: "Doctor's available time is not set",
    AllocationFailure.OUTSIDE_AVAILABILITY: "Selected time is not within doctor's available slots",
    AllocationFailure.SLOT_ALREADY_BOOKED: "Selected time is already booked",
    AllocationFailure.SLOTS_FULL: "Appointments full for selected day",
}


def parse_time(text: str) -> int:
    """'1:30 PM' -> 810. 12 AM is midnight, 12 PM is noon."""
    match = _CLOCK_RE.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise MalformedTimeString(f"Invalid time {text!r}, expected format 'H:MM AM' or 'H:MM PM'")
    hours, minutes, modifier = int(match.group(1)), int(match.group(2)), match.group(3)
    if not 1 <= hours <= 12 or minutes > 59:
        raise MalformedTimeString(f"Invalid time {text!r}, hour must be 1-12 and minute 00-59")
    if modifier == "PM" and hours < 12:
        hours += 12
    if modifier == "AM" and hours == 12:
        hours = 0
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """810 -> '1:30 PM'."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    hours, mins = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{mins:02d} {period}"


def canonical_time(text: str) -> str:
    return format_time(parse_time(text))


def day_of_week(d: date | str) -> str:
    """English weekday name for a calendar date.

    ISO strings are read as plain calendar dates, never through a local-time
    conversion, so the answer does not depend on the process time zone.
    """
    if isinstance(d, str):
        d = date.fromisoformat(d)
    return WEEKDAYS[d.weekday()]


@dataclass(frozen=True)
class AvailabilityWindow:
    start: int
    end: int

    def __post_init__(self) -> None:
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise MalformedTimeString(
                f"Invalid availability window ({self.start}, {self.end}): start must be before end"
            )

    @classmethod
    def parse(cls, text: str) -> "AvailabilityWindow":
        """'9:00 AM - 12:00 PM' -> AvailabilityWindow(540, 720)."""
        parts = text.split(_WINDOW_SEPARATOR) if isinstance(text, str) else []
        if len(parts) != 2:
            raise MalformedTimeString(f"Invalid availability window {text!r}, expected '<start> - <end>'")
        return cls(start=parse_time(parts[0]), end=parse_time(parts[1]))

    def __str__(self) -> str:
        return f"{format_time(self.start)}{_WINDOW_SEPARATOR}{format_time(self.end)}"

    def slot_starts(self) -> range:
        """Every start minute with a full slot inside the window, earliest first."""
        return range(self.start, self.end - SLOT_MINUTES + 1, SLOT_MINUTES)

    def fits(self, candidate: int) -> bool:
        return self.start <= candidate and candidate + SLOT_MINUTES <= self.end


@dataclass(frozen=True)
class DoctorAvailability:
    weekdays: frozenset[str]
    windows: tuple[AvailabilityWindow, ...]

    @classmethod
    def from_descriptor(cls, days: list[str], windows: list[str]) -> "DoctorAvailability":
        """Parse the stored string descriptor once; window order is preserved."""
        return cls(
            weekdays=frozenset(days),
            windows=tuple(AvailabilityWindow.parse(w) for w in windows),
        )


@dataclass(frozen=True)
class BookingRequest:
    date: date
    availability: DoctorAvailability
    taken: frozenset[int] = frozenset()
    requested_time: int | None = None


@dataclass(frozen=True)
class AllocationResult:
    time: int | None = None
    failure: AllocationFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def resolved(cls, time: int) -> "AllocationResult":
        return cls(time=time)

    @classmethod
    def failed(cls, failure: AllocationFailure) -> "AllocationResult":
        return cls(failure=failure)


def is_within_availability(candidate: int, windows: Sequence[AvailabilityWindow]) -> bool:
    return any(w.fits(candidate) for w in windows)


def find_first_free_slot(windows: Sequence[AvailabilityWindow], taken: Collection[int]) -> int | None:
    """First-fit scan in declared window order, then by time within a window."""
    for window in windows:
        for cursor in window.slot_starts():
            if cursor not in taken:
                return cursor
    return None


def list_slots(windows: Sequence[AvailabilityWindow], taken: Collection[int]) -> list[tuple[int, bool]]:
    """(slot_start, available) for every slot, in the order auto-assignment visits them."""
    return [(cursor, cursor not in taken) for window in windows for cursor in window.slot_starts()]


def allocate(request: BookingRequest, today: date) -> AllocationResult:
    """Decide the appointment time for one booking request.

    Checks run in a fixed order: past date, doctor weekday, configured windows,
    then either the explicit time (availability, conflicts) or an auto-assignment
    search. Existing bookings are only consulted in the last step.
    """
    if request.date < today:
        return AllocationResult.failed(AllocationFailure.PAST_DATE_REJECTED)

    availability = request.availability
    if day_of_week(request.date) not in availability.weekdays:
        return AllocationResult.failed(AllocationFailure.DOCTOR_UNAVAILABLE)
    if not availability.windows:
        return AllocationResult.failed(AllocationFailure.NO_AVAILABILITY_CONFIGURED)

    if request.requested_time is not None:
        if not is_within_availability(request.requested_time, availability.windows):
            return AllocationResult.failed(AllocationFailure.OUTSIDE_AVAILABILITY)
        if request.requested_time in request.taken:
            return AllocationResult.failed(AllocationFailure.SLOT_ALREADY_BOOKED)
        return AllocationResult.resolved(request.requested_time)

    slot = find_first_free_slot(availability.windows, request.taken)
    if slot is None:
        return AllocationResult.failed(AllocationFailure.SLOTS_FULL)
    return AllocationResult.resolved(slot)


def failure_message(failure: AllocationFailure, request: BookingRequest) -> str:
    template = FAILURE_MESSAGES[failure]
    if failure is AllocationFailure.DOCTOR_UNAVAILABLE:
        days = [day for day in WEEKDAYS if day in request.availability.weekdays]
        return template.format(day=day_of_week(request.date), days=", ".join(days))
    return template
