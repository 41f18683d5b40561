"""Runtime presentation state: status, results, panes and history.

Nothing here is persisted. Views subscribe with ``add_listener`` and are
notified once per discrete change with the name of the change.
"""

import time
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum

from .backends.base import BoundingBox, TextBlock
from .layout import LayoutMode
from .log import get_logger

logger = get_logger("session")

DEFAULT_HISTORY_LIMIT = 100


class Status(Enum):
    """Pipeline run status."""

    IDLE = "idle"
    CAPTURING = "capturing"
    RECOGNIZING = "recognizing"
    TRANSLATING = "translating"
    SKIPPED = "skipped"
    SUCCESS = "success"
    ERROR = "error"


class SubtitleStatus(Enum):
    IDLE = "idle"
    LISTENING = "listening"
    RECOGNIZING = "recognizing"
    TRANSLATING = "translating"


class PaneStatus(Enum):
    """Translation status of one scattered pane."""

    PENDING = "pending"
    TRANSLATING = "translating"
    DONE = "done"
    ERROR = "error"


@dataclass
class LogicalBlock:
    """A text block positioned in UI coordinates, shown as its own pane."""

    id: str
    index: int
    source_text: str
    bbox: BoundingBox
    status: PaneStatus = PaneStatus.PENDING
    translated_text: str = ""
    error: str | None = None


@dataclass
class HistoryEntry:
    """One completed translation."""

    source: str
    translated: str
    provider: str | None = None
    source_lang: str | None = None
    target_lang: str | None = None
    mode: LayoutMode = LayoutMode.UNIFIED
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: float = field(default_factory=time.time)


@dataclass
class SubtitleStats:
    processed: int = 0
    skipped: int = 0


Listener = Callable[[str, "Session"], None]


def _pane_id() -> str:
    return f"pane-{uuid.uuid4().hex[:8]}"


class Session:
    """State container for one translation window."""

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.history_limit = history_limit
        self._listeners: list[Listener] = []

        self.status = Status.IDLE
        self.source_text = ""
        self.translated_text = ""
        self.error: str | None = None
        self.provider: str | None = None
        self.engine: str | None = None
        self.source_lang: str | None = None
        self.target_lang: str | None = None
        self.started_at: float | None = None
        self.duration: float | None = None

        self.layout_mode = LayoutMode.UNIFIED
        self.panes: list[LogicalBlock] = []
        self.history: list[HistoryEntry] = []

        self.subtitle_status = SubtitleStatus.IDLE
        self.subtitle_stats = SubtitleStats()
        self.current_subtitle = ""
        self.previous_subtitle = ""

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Subscribe to changes. Returns a function that unsubscribes."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self, change: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(change, self)
            except Exception:
                logger.exception("listener failed", change=change)

    def set_status(self, status: Status) -> None:
        self.status = status
        self._notify("status")

    def start_capture(self) -> None:
        """Enter the capturing state, clearing the previous error."""
        self.error = None
        self.started_at = time.monotonic()
        self.duration = None
        self.set_status(Status.CAPTURING)

    def set_source(self, text: str, engine: str | None = None) -> None:
        self.source_text = text
        if engine is not None:
            self.engine = engine
        self._notify("source")

    def set_languages(self, source_lang: str, target_lang: str) -> None:
        self.source_lang = source_lang
        self.target_lang = target_lang

    def start_translation(self) -> None:
        """Enter the translating state with an empty result."""
        self.translated_text = ""
        self.set_status(Status.TRANSLATING)

    def append_chunk(self, chunk: str) -> None:
        """Append streamed output to the translated text."""
        self.translated_text += chunk
        self._notify("chunk")

    def set_result(self, text: str, provider: str | None = None) -> None:
        self.translated_text = text
        self.provider = provider
        self.error = None
        if self.started_at is not None:
            self.duration = time.monotonic() - self.started_at
        self.set_status(Status.SUCCESS)

    def set_error(self, message: str) -> None:
        self.error = message
        self.set_status(Status.ERROR)

    def set_layout_mode(self, mode: LayoutMode) -> None:
        self.layout_mode = mode
        self._notify("layout")

    def set_panes(self, blocks: Iterable[TextBlock], scale_factor: float = 1.0) -> list[LogicalBlock]:
        """Create one pending pane per block, in UI coordinates.

        Args:
            blocks: Blocks with valid geometry, in device pixels.
            scale_factor: Display scale factor (device pixels per UI pixel).

        Returns:
            The new panes.
        """
        self.panes = [
            LogicalBlock(
                id=_pane_id(),
                index=index,
                source_text=block.text,
                bbox=block.bbox.scaled(scale_factor),
            )
            for index, block in enumerate(blocks)
        ]
        self._notify("panes")
        return list(self.panes)

    def update_pane(self, pane_id: str, **changes) -> LogicalBlock | None:
        """Apply field changes to one pane. Unknown ids are ignored."""
        for position, pane in enumerate(self.panes):
            if pane.id == pane_id:
                self.panes[position] = replace(pane, **changes)
                self._notify("pane")
                return self.panes[position]
        return None

    def get_pane(self, pane_id: str) -> LogicalBlock | None:
        for pane in self.panes:
            if pane.id == pane_id:
                return pane
        return None

    def clear_panes(self) -> None:
        self.panes = []
        self.layout_mode = LayoutMode.UNIFIED
        self._notify("panes")

    def add_history(self, entry: HistoryEntry) -> None:
        """Prepend an entry, keeping at most ``history_limit`` entries."""
        self.history = [entry, *self.history][: self.history_limit]
        self._notify("history")

    def clear_history(self) -> None:
        self.history = []
        self._notify("history")

    def set_subtitle_status(self, status: SubtitleStatus) -> None:
        self.subtitle_status = status
        self._notify("subtitle_status")

    def set_subtitle(self, text: str) -> None:
        """Show a new subtitle, keeping the previous distinct one."""
        if self.current_subtitle and self.current_subtitle != text:
            self.previous_subtitle = self.current_subtitle
        self.current_subtitle = text
        self._notify("subtitle")

    def record_subtitle_frame(self, skipped: bool) -> None:
        if skipped:
            self.subtitle_stats.skipped += 1
        else:
            self.subtitle_stats.processed += 1

    def clear_subtitle(self) -> None:
        self.current_subtitle = ""
        self.previous_subtitle = ""
        self.subtitle_stats = SubtitleStats()
        self._notify("subtitle")

    def clear(self) -> None:
        """Reset the result state; panes and history are kept."""
        self.status = Status.IDLE
        self.source_text = ""
        self.translated_text = ""
        self.error = None
        self.provider = None
        self.engine = None
        self.source_lang = None
        self.target_lang = None
        self.duration = None
        self._notify("status")
