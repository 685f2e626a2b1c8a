"""Check value type shared by every probe."""

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity of a diagnostic finding."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Check:
    """One classified diagnostic finding."""
    severity: Severity
    message: str

    @classmethod
    def success(cls, message: str) -> "Check":
        return cls(Severity.SUCCESS, message)

    @classmethod
    def warning(cls, message: str) -> "Check":
        return cls(Severity.WARNING, message)

    @classmethod
    def error(cls, message: str) -> "Check":
        return cls(Severity.ERROR, message)

    @classmethod
    def info(cls, message: str) -> "Check":
        return cls(Severity.INFO, message)


# Insertion order is display order.
CheckList = list[Check]


def worst_severity(checks: CheckList) -> Severity:
    """Collapse a list to ERROR > WARNING > SUCCESS (INFO counts as success)."""
    if any(c.severity == Severity.ERROR for c in checks):
        return Severity.ERROR
    if any(c.severity == Severity.WARNING for c in checks):
        return Severity.WARNING
    return Severity.SUCCESS
