"""Error taxonomy shared by tools and the dispatcher."""

from __future__ import annotations

from typing import Any, Dict, Optional


class AssistantError(Exception):
    """Base class for failures that end up as a reply instead of a crash."""

    code = "assistant_error"

    def __init__(self, message: str, *, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_metadata(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class RecognitionFailure(AssistantError):
    """A time phrase (or similar free text) could not be understood."""

    code = "recognition_failure"


class LookupFailure(AssistantError):
    """A place could not be geocoded or no route was returned."""

    code = "lookup_failure"


class PermissionDenied(AssistantError):
    """The host refused access to calendar, notifications or similar."""

    code = "permission_denied"


class IntegrationFailure(AssistantError):
    """A downstream service (chat, calendar, link opener) errored."""

    code = "integration_failure"


__all__ = [
    "AssistantError",
    "IntegrationFailure",
    "LookupFailure",
    "PermissionDenied",
    "RecognitionFailure",
]
