class BillingError(Exception):
    """Base class for billing failures reported to the caller"""


class InvalidMonth(BillingError, ValueError):
    """A month identifier is not a well-formed YYYY-MM string"""

    def __init__(self, month):
        self.month = month
        super().__init__(f"Invalid month identifier {month!r}, expected YYYY-MM")


class InvalidPeriod(BillingError, ValueError):
    """An invoice period is malformed or ends before it starts"""

    def __init__(self, start_month, end_month, reason: str):
        self.start_month = start_month
        self.end_month = end_month
        self.reason = reason
        super().__init__(f"Invalid billing period {start_month!r} - {end_month!r}: {reason}")
