"""
Errors raised by the commission engine.

"No applicable rule" and "role without a commission type" are not errors:
calculators and the coordinator return None for them.
"""


class CommissionError(Exception):
    """Base class for commission engine errors."""


class InvalidMonth(CommissionError, ValueError):
    """Month is not in YYYY-MM format."""


class InvalidRuleTiers(CommissionError, ValueError):
    """Tier table does not match the rule type's shape."""


class MetricsUnavailable(CommissionError):
    """Leads/loads/invoices could not be read. Nothing was written."""

    def __init__(self, user_id: int, month: str, reason: str):
        self.user_id = user_id
        self.month = month
        self.reason = reason
        super().__init__(f"Metrics unavailable for user {user_id} ({month}): {reason}")


class ConcurrentRecalculationConflict(CommissionError):
    """Another writer kept winning the race for the same (user, month)."""

    def __init__(self, user_id: int, month: str, attempts: int):
        self.user_id = user_id
        self.month = month
        self.attempts = attempts
        super().__init__(
            f"Commission for user {user_id} ({month}) still conflicting "
            f"after {attempts} attempts"
        )
