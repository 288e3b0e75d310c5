from typing import Optional


class SyncError(Exception):
    """Base for failures surfaced by the recurring order sync.

    The underlying store error, when there is one, is chained as __cause__.
    """


class SyncValidationError(SyncError):
    """Missing or malformed target date. Raised before any store access."""


class LookupFailure(SyncError):
    """A read needed before stops can be created failed."""


class ScheduleConflict(SyncError):
    """Another sync created the schedule for this date first.

    Recovered inside the engine by re-reading the schedule.
    """


class PartialInsertFailure(SyncError):
    """A single stop insert failed. The batch carries on without it."""

    def __init__(self, order_id: str, reason: str):
        super().__init__(f"Could not create stop for recurring order {order_id}: {reason}")
        self.order_id = order_id
        self.reason = reason


class FatalStoreFailure(SyncError):
    """Store became unusable mid-batch. Stops already inserted stay committed."""

    def __init__(self, message: str, stops_created: int = 0, schedule_id: Optional[str] = None):
        super().__init__(message)
        self.stops_created = stops_created
        self.schedule_id = schedule_id


class SyncTimeout(SyncError):
    """The whole sync did not finish within the configured timeout."""
