from __future__ import annotations


class LauncherError(Exception):
    """Base class for recoverable errors raised inside the launcher."""

    code = "launcher_error"

    def to_detail(self) -> dict[str, str]:
        return {"error": self.code, "message": str(self)}


class MissingRequiredField(LauncherError, ValueError):
    code = "missing_required_field"

    def __init__(self, label: str):
        super().__init__(f"Field '{label}' is required.")
        self.label = label

    def to_detail(self) -> dict[str, str]:
        detail = super().to_detail()
        detail["field"] = self.label
        return detail


class MalformedSubmission(LauncherError, ValueError):
    code = "malformed_submission"


class PersistenceFailure(LauncherError, RuntimeError):
    code = "persistence_failure"


class ClipboardUnavailable(LauncherError, RuntimeError):
    code = "clipboard_unavailable"
