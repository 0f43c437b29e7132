from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Protocol

from ..core.errors import ClipboardUnavailable


log = logging.getLogger("launcher.services.launcher")

COPIED_MESSAGE = "Prompt copied. Paste it into the GPT chat window."
CLIPBOARD_WARNING = "Could not copy the prompt automatically. Copy it manually and paste it into the GPT."


class Clipboard(Protocol):
    def copy(self, text: str) -> None:
        """Place ``text`` on the clipboard or raise ``ClipboardUnavailable``."""


class Navigator(Protocol):
    def open(self, url: str) -> None:
        ...


@dataclass(frozen=True)
class LaunchOutcome:
    prompt: str
    url: str
    copied: bool
    navigated: bool
    message: str | None = None
    warning: str | None = None
    manual_copy_text: str | None = None


def launch(prompt: str, url: str, *, clipboard: Clipboard, navigator: Navigator) -> LaunchOutcome:
    """Copy ``prompt`` then open ``url``.

    The two side effects are independent: a clipboard failure is reported as
    a warning carrying the prompt for manual copy and navigation still runs.
    """
    copied = False
    warning: str | None = None
    try:
        clipboard.copy(prompt)
        copied = True
    except ClipboardUnavailable as exc:
        log.warning("Clipboard unavailable: %s", exc)
        warning = CLIPBOARD_WARNING

    navigated = False
    if url:
        navigator.open(url)
        navigated = True

    return LaunchOutcome(
        prompt=prompt,
        url=url,
        copied=copied,
        navigated=navigated,
        message=COPIED_MESSAGE if copied else None,
        warning=warning,
        manual_copy_text=None if copied else prompt,
    )


class HandoffClipboard:
    """Clipboard that hands the text to the HTTP client for the actual copy.

    Browsers without clipboard access announce it up front; the copy is then
    reported as unavailable so the response carries the manual-copy fallback.
    """

    def __init__(self, *, available: bool = True) -> None:
        self.available = available
        self.text: str | None = None

    def copy(self, text: str) -> None:
        if not self.available:
            raise ClipboardUnavailable("Client reported no clipboard access.")
        self.text = text


class HandoffNavigator:
    def __init__(self) -> None:
        self.url: str | None = None

    def open(self, url: str) -> None:
        self.url = url
