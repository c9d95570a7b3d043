from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ServiceResult:
    """
    Outcome of a call to an external collaborator (bio generator, roster lookup).

    value    -- the usable value, or None when the service had nothing to give
    fallback -- True when `value` is a substitute rather than the service's answer
    error    -- why the service degraded; None for a clean answer or a clean miss
    """
    value: Optional[str]
    fallback: bool = False
    error: Optional[str] = None

    @classmethod
    def ok(cls, value):
        return cls(value=value)

    @classmethod
    def missing(cls):
        return cls(value=None)

    @classmethod
    def degraded(cls, value, error):
        return cls(value=value, fallback=True, error=error)

    @property
    def found(self):
        return self.value is not None and not self.fallback
