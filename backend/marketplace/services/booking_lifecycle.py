from typing import Dict, FrozenSet

BOOKING_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

BOOKING_TERMINAL_STATUSES = frozenset(status for status, targets in BOOKING_TRANSITIONS.items() if not targets)


class BookingTransitionError(ValueError):
    pass


def is_transition_allowed(current_status: str, next_status: str) -> bool:
    if current_status == next_status:
        return True
    return next_status in BOOKING_TRANSITIONS.get(current_status, frozenset())


def assert_transition_allowed(current_status: str, next_status: str) -> None:
    if next_status not in BOOKING_TRANSITIONS:
        raise BookingTransitionError(f"Unknown booking status: {next_status}")
    if current_status in BOOKING_TERMINAL_STATUSES and current_status != next_status:
        raise BookingTransitionError(f"Booking is already {current_status}")
    if not is_transition_allowed(current_status, next_status):
        raise BookingTransitionError(f"Invalid status transition: {current_status} -> {next_status}")
