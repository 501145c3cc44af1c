"""Issue representation for best-effort runtime operations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

IssueSeverity = Literal["error", "warning", "info"]


@dataclass(slots=True)
class RuntimeIssue:
    """A problem observed while acting on one cluster resource."""

    code: str
    message: str
    severity: IssueSeverity = "error"
    kind: Optional[str] = None
    subject: Optional[str] = None
    status: Optional[int] = None
    exception: Optional[BaseException] = None

    def is_error(self) -> bool:
        """Return True when the issue is considered an error."""
        return self.severity == "error"
