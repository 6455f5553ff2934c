"""Test doubles shared across the test modules."""

from budget_tracker.services.storage import (
    InMemoryKeyValueStorage,
    PersistenceWriteError,
    StorageError,
)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class RejectingStorage(InMemoryKeyValueStorage):
    """Storage whose writes fail once `reject_writes` is set."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.reject_writes = False
        self.write_count = 0

    def set(self, key: str, value: str) -> None:
        if self.reject_writes:
            raise PersistenceWriteError("quota exceeded")
        self.write_count += 1
        super().set(key, value)


class UnreadableStorage(InMemoryKeyValueStorage):
    """Storage whose reads always fail."""

    def get(self, key: str):
        raise StorageError("disk on fire")


class FlakyStorage(InMemoryKeyValueStorage):
    """Storage whose first `failures` reads fail, then recover."""

    def __init__(self, initial=None, failures: int = 1):
        super().__init__(initial)
        self.failures = failures

    def get(self, key: str):
        if self.failures > 0:
            self.failures -= 1
            raise StorageError("network blip")
        return super().get(key)


def logged_event_types(audit_logger) -> list[str]:
    """Event type values passed to a mocked AuditLogger.log, in order."""
    return [c.args[0].event_type.value for c in audit_logger.log.call_args_list]
