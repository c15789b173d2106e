"""Status state machines with transition validation."""

from __future__ import annotations

from typing import ClassVar

from hrms_core.exceptions import InvalidTransitionError
from hrms_core.models.enums import CheckStatus, LeaveRequestStatus, PayrollRunStatus


def _value(status: str) -> str:
    return getattr(status, "value", status)


class StateMachine:
    """Transition table lookup shared by the concrete machines."""

    VALID_TRANSITIONS: ClassVar[dict[str, list[str]]] = {}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(
        cls, from_status: str, to_status: str, reason: str | None = None
    ) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(_value(from_status), _value(to_status), reason)

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return list(cls.VALID_TRANSITIONS.get(current_status, []))

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return not cls.VALID_TRANSITIONS.get(status)


class PayrollRunStateMachine(StateMachine):
    """State machine for payroll run status transitions.

    Allowed transitions:
    - DRAFT → PROCESSING, CANCELLED
    - PROCESSING → CALCULATED, ERROR
    - ERROR → PROCESSING (retry), CANCELLED
    - CALCULATED → APPROVED, CANCELLED
    - APPROVED → PAID, CANCELLED
    - PAID and CANCELLED are terminal
    """

    VALID_TRANSITIONS = {
        PayrollRunStatus.DRAFT: [PayrollRunStatus.PROCESSING, PayrollRunStatus.CANCELLED],
        PayrollRunStatus.PROCESSING: [PayrollRunStatus.CALCULATED, PayrollRunStatus.ERROR],
        PayrollRunStatus.ERROR: [PayrollRunStatus.PROCESSING, PayrollRunStatus.CANCELLED],
        PayrollRunStatus.CALCULATED: [PayrollRunStatus.APPROVED, PayrollRunStatus.CANCELLED],
        PayrollRunStatus.APPROVED: [PayrollRunStatus.PAID, PayrollRunStatus.CANCELLED],
        PayrollRunStatus.PAID: [],
        PayrollRunStatus.CANCELLED: [],
    }

    # Statuses where the run can be (re)processed
    MODIFIABLE = {PayrollRunStatus.DRAFT, PayrollRunStatus.ERROR}

    # Statuses where payslips are final
    RESULTS_IMMUTABLE = {PayrollRunStatus.APPROVED, PayrollRunStatus.PAID}

    @classmethod
    def can_be_modified(cls, status: str) -> bool:
        return status in cls.MODIFIABLE

    @classmethod
    def are_results_immutable(cls, status: str) -> bool:
        return status in cls.RESULTS_IMMUTABLE


class LeaveRequestStateMachine(StateMachine):
    """State machine for leave requests.

    PENDING requests are decided (APPROVED/REJECTED) or withdrawn by the
    employee; PENDING and APPROVED requests can be cancelled.
    """

    VALID_TRANSITIONS = {
        LeaveRequestStatus.PENDING: [
            LeaveRequestStatus.APPROVED,
            LeaveRequestStatus.REJECTED,
            LeaveRequestStatus.CANCELLED,
            LeaveRequestStatus.WITHDRAWN,
        ],
        LeaveRequestStatus.APPROVED: [LeaveRequestStatus.CANCELLED],
        LeaveRequestStatus.REJECTED: [],
        LeaveRequestStatus.CANCELLED: [],
        LeaveRequestStatus.WITHDRAWN: [],
    }


class ComplianceCheckStateMachine(StateMachine):
    """PENDING → COMPLIANT | NON_COMPLIANT. Resolution is a separate flag."""

    VALID_TRANSITIONS = {
        CheckStatus.PENDING: [
            CheckStatus.COMPLIANT,
            CheckStatus.NON_COMPLIANT,
            CheckStatus.WARNING,
            CheckStatus.REVIEW_REQUIRED,
        ],
        CheckStatus.COMPLIANT: [],
        CheckStatus.NON_COMPLIANT: [],
        CheckStatus.WARNING: [],
        CheckStatus.REVIEW_REQUIRED: [],
    }
