"""Status lifecycle for quotes and jobs.

Both status fields are closed enums. Today any valid status may follow
any other valid status — the portal has never enforced a business order
(a declined quote can be re-opened, a cancelled job re-scheduled).

A StatusWorkflow can carry a transition table (state → allowed next
states) if stricter ordering is ever wanted; with `transitions=None` only
membership is checked.
"""

from typing import Optional

from declutter.errors import ValidationError

QUOTE_STATUSES = ("pending", "reviewed", "approved", "declined", "completed")
JOB_STATUSES = ("scheduled", "in_progress", "completed", "cancelled")


class StatusWorkflow:
    """Validates values (and optionally transitions) for one status field."""

    def __init__(
        self,
        name: str,
        statuses: tuple[str, ...],
        initial: str,
        transitions: Optional[dict[str, set[str]]] = None,
    ):
        self.name = name
        self.statuses = statuses
        self.initial = initial
        self.transitions = transitions

    def is_valid(self, value) -> bool:
        return isinstance(value, str) and value in self.statuses

    def can_transition(self, old: str, new: str) -> bool:
        if not self.is_valid(new):
            return False
        if self.transitions is None:
            return True
        return new in self.transitions.get(old, set())

    def check(self, new: str, old: Optional[str] = None) -> str:
        """Return `new` if acceptable, raise ValidationError otherwise."""
        if not self.is_valid(new):
            raise ValidationError("Invalid status")
        if old is not None and not self.can_transition(old, new):
            raise ValidationError(
                f"Cannot move {self.name} from '{old}' to '{new}'"
            )
        return new


QUOTE_WORKFLOW = StatusWorkflow("quote", QUOTE_STATUSES, initial="pending")
JOB_WORKFLOW = StatusWorkflow("job", JOB_STATUSES, initial="scheduled")


def validate_quote_status(value) -> bool:
    return QUOTE_WORKFLOW.is_valid(value)


def validate_job_status(value) -> bool:
    return JOB_WORKFLOW.is_valid(value)
