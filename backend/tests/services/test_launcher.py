from gpt_launcher.core.errors import ClipboardUnavailable
from gpt_launcher.services.launcher import (
    CLIPBOARD_WARNING,
    COPIED_MESSAGE,
    HandoffClipboard,
    HandoffNavigator,
    launch,
)


class _RecordingClipboard:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.copied: list[str] = []

    def copy(self, text: str) -> None:
        if self.fail:
            raise ClipboardUnavailable("denied")
        self.copied.append(text)


class _RecordingNavigator:
    def __init__(self):
        self.opened: list[str] = []

    def open(self, url: str) -> None:
        self.opened.append(url)


def test_launch_copies_then_navigates():
    clipboard, navigator = _RecordingClipboard(), _RecordingNavigator()

    outcome = launch("Hello", "https://chat.openai.com/g/g-x", clipboard=clipboard, navigator=navigator)

    assert clipboard.copied == ["Hello"]
    assert navigator.opened == ["https://chat.openai.com/g/g-x"]
    assert outcome.copied and outcome.navigated
    assert outcome.message == COPIED_MESSAGE
    assert outcome.warning is None
    assert outcome.manual_copy_text is None


def test_clipboard_failure_does_not_block_navigation():
    clipboard, navigator = _RecordingClipboard(fail=True), _RecordingNavigator()

    outcome = launch("Hello", "https://chat.openai.com/g/g-x", clipboard=clipboard, navigator=navigator)

    assert navigator.opened == ["https://chat.openai.com/g/g-x"]
    assert outcome.copied is False
    assert outcome.navigated is True
    assert outcome.warning == CLIPBOARD_WARNING
    assert outcome.manual_copy_text == "Hello"


def test_launch_without_url_only_copies():
    clipboard, navigator = _RecordingClipboard(), _RecordingNavigator()

    outcome = launch("Hello", "", clipboard=clipboard, navigator=navigator)

    assert navigator.opened == []
    assert outcome.copied is True
    assert outcome.navigated is False


def test_handoff_adapters_record_the_side_effects():
    clipboard, navigator = HandoffClipboard(), HandoffNavigator()

    launch("Prompt", "https://example.com", clipboard=clipboard, navigator=navigator)

    assert clipboard.text == "Prompt"
    assert navigator.url == "https://example.com"


def test_unavailable_handoff_clipboard_keeps_no_text():
    clipboard = HandoffClipboard(available=False)

    outcome = launch("Prompt", "https://example.com", clipboard=clipboard, navigator=HandoffNavigator())

    assert clipboard.text is None
    assert outcome.manual_copy_text == "Prompt"
