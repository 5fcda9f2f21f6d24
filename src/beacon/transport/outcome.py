"""Result of one streaming request."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    """What the request worker observed: a response status, an error, or both."""

    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and 200 <= self.status_code < 300

    @classmethod
    def from_response(cls, response: httpx.Response) -> "DeliveryOutcome":
        if response.is_success:
            return cls(status_code=response.status_code)
        return cls(status_code=response.status_code, error=response.text or response.reason_phrase)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "DeliveryOutcome":
        # repr keeps the exception class, which is what identifies TLS failures
        return cls(error=repr(exc))

    def describe(self) -> str:
        if self.status_code is None:
            return f"Couldn't establish connection to intake server: {self.error}"
        if self.ok:
            return f"Intake server accepted events ({self.status_code})"
        return f"Intake server responded with an error ({self.status_code}): {self.error}"
