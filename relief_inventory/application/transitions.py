"""
Transition tables for the resupply and donation workflows.

Each workflow declares its legal (state, action) -> state moves here and
nowhere else; callers go through TransitionTable.target() which raises
InvalidStateTransitionError for anything the table does not list.
"""

from typing import Dict, Tuple

from relief_inventory.domain.enums import (
    DonationAction,
    DonationStatus,
    ResupplyAction,
    ResupplyStatus,
)
from relief_inventory.domain.errors import InvalidStateTransitionError


class TransitionTable:
    def __init__(self, resource: str, moves: Dict[Tuple[object, object], object]):
        self.resource = resource
        self._moves = dict(moves)

    def allows(self, current, action) -> bool:
        return (current, action) in self._moves

    def target(self, current, action):
        if not self.allows(current, action):
            raise InvalidStateTransitionError(
                self.resource, getattr(current, "value", str(current)), getattr(action, "value", str(action))
            )
        return self._moves[(current, action)]


RESUPPLY_TRANSITIONS = TransitionTable(
    "resupply request",
    {
        (ResupplyStatus.PENDING, ResupplyAction.APPROVE): ResupplyStatus.APPROVED,
        (ResupplyStatus.PENDING, ResupplyAction.REJECT): ResupplyStatus.REJECTED,
        (ResupplyStatus.APPROVED, ResupplyAction.FULFILL): ResupplyStatus.FULFILLED,
        (ResupplyStatus.PENDING, ResupplyAction.CANCEL): ResupplyStatus.CANCELLED,
        (ResupplyStatus.APPROVED, ResupplyAction.CANCEL): ResupplyStatus.CANCELLED,
    },
)

DONATION_TRANSITIONS = TransitionTable(
    "donation offer",
    {
        (DonationStatus.OFFERED, DonationAction.ACCEPT): DonationStatus.ACCEPTED,
        (DonationStatus.OFFERED, DonationAction.DECLINE): DonationStatus.CANCELLED,
        (DonationStatus.OFFERED, DonationAction.WITHDRAW): DonationStatus.CANCELLED,
        (DonationStatus.ACCEPTED, DonationAction.DELIVER): DonationStatus.DELIVERED,
    },
)
