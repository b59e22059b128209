# core/exceptions.py
from __future__ import annotations


class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when data is invalid or violates constraints."""


class NotFoundError(DomainError):
    """Raised when an entity is not found."""


class BusinessRuleError(DomainError):
    """Raised when business rules are violated (e.g., circular dependencies)."""


class ConcurrencyError(DomainError):
    """Raised when optimistic locking detects a stale update."""


class CycleDetectedError(BusinessRuleError):
    """Raised when a dependency edge set contains a cycle."""
    def __init__(self, cycle: list[str], message: str | None = None, *, code: str = "DEPENDENCY_CYCLE"):
        self.cycle = list(cycle)
        super().__init__(
            message or f"Circular dependency detected: {' -> '.join(self.cycle)}",
            code=code,
        )


class LockedScheduleError(BusinessRuleError):
    """Raised when a mutation targets a baseline or locked schedule."""
    def __init__(self, schedule_id: str, message: str | None = None):
        self.schedule_id = schedule_id
        super().__init__(
            message or f"Schedule {schedule_id} is locked and cannot be modified.",
            code="SCHEDULE_LOCKED",
        )


class RollupInvariantError(RuntimeError):
    """Raised when derived aggregates come out impossible. Indicates a bug, not bad input."""
