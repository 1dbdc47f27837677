"""The single result type produced by every safety check."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SafetyVerdict:
    """
    Pass/fail decision for one candidate call.

    A blocked verdict always carries a non-empty reason and suggestion; a safe
    verdict never carries either. Use ``ok()`` and ``block()`` to build one.
    """

    safe: bool
    reason: Optional[str] = None
    suggestion: Optional[str] = None

    def __post_init__(self) -> None:
        if self.safe:
            if self.reason is not None or self.suggestion is not None:
                raise ValueError("A safe verdict cannot carry a reason or suggestion.")
        elif not self.reason or not self.suggestion:
            raise ValueError("An unsafe verdict requires both a reason and a suggestion.")

    @classmethod
    def ok(cls) -> "SafetyVerdict":
        return _SAFE

    @classmethod
    def block(cls, reason: str, suggestion: str) -> "SafetyVerdict":
        return cls(safe=False, reason=reason, suggestion=suggestion)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"safe": self.safe}
        if not self.safe:
            payload["reason"] = self.reason
            payload["suggestion"] = self.suggestion
        return payload


_SAFE = SafetyVerdict(safe=True)
