"""Exceptions raised by shape compilation and validation."""
from __future__ import annotations


class UnredactedGuardError(RuntimeError):
    """A guard reached a probe that requires fully redacted shapes."""

    def __init__(self, guard):
        super().__init__(
            f"unredacted {guard.axis} guard {sorted(map(str, guard.values))}: "
            "redact the shape before compiling or validating it"
        )
        self.guard = guard
