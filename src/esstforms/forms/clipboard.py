from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import pyperclip

logger = logging.getLogger(__name__)

ClipboardWriter = Callable[[str], None]

CLIPBOARD_BLOCKED_MESSAGE = (
    "클립보드 복사가 차단되었습니다. 보안 설정을 확인해주세요. "
    "(Clipboard copy was blocked. Please check your security settings.)"
)
CLIPBOARD_COPIED_MESSAGE = "Text가 클립보드에 복사되었습니다. (Text copied to clipboard.)"


@dataclass(frozen=True)
class ClipboardResult:
    ok: bool
    message: str


def copy_text(text: str, writer: Optional[ClipboardWriter] = None) -> ClipboardResult:
    """
    Write `text` to the system clipboard.

    Never raises; callers decide whether a failed copy matters.

    Args:
        text: Preview text.
        writer: Replacement for pyperclip.copy (tests, headless hosts).
    """
    write = writer or pyperclip.copy
    try:
        write(text)
    except (pyperclip.PyperclipException, OSError, RuntimeError) as exc:
        logger.warning("Clipboard write failed: %s", exc)
        return ClipboardResult(False, CLIPBOARD_BLOCKED_MESSAGE)
    return ClipboardResult(True, CLIPBOARD_COPIED_MESSAGE)
