"""Tests for the session state container."""

from transpane.backends.base import BoundingBox, TextBlock
from transpane.layout import LayoutMode
from transpane.session import HistoryEntry, PaneStatus, Session, Status


class TestListeners:
    """Tests for change notification."""

    def test_listener_notified(self):
        """Listeners receive the change name and the session."""
        session = Session()
        changes = []
        session.add_listener(lambda change, s: changes.append((change, s)))

        session.set_status(Status.RECOGNIZING)

        assert changes == [("status", session)]

    def test_remove_listener(self):
        """The returned function unsubscribes."""
        session = Session()
        changes = []
        remove = session.add_listener(lambda change, s: changes.append(change))

        remove()
        session.set_status(Status.RECOGNIZING)

        assert changes == []

    def test_failing_listener_is_isolated(self, captured_logs):
        """A raising listener does not stop the others."""
        session = Session()
        changes = []

        def broken(change, s):
            raise RuntimeError("view gone")

        session.add_listener(broken)
        session.add_listener(lambda change, s: changes.append(change))

        session.set_status(Status.SUCCESS)

        assert changes == ["status"]
        assert any(entry["event"] == "listener failed" for entry in captured_logs)


class TestResultState:
    """Tests for status and result fields."""

    def test_start_translation_clears_result(self):
        """Starting a translation empties the previous result."""
        session = Session()
        session.set_result("old", "p")

        session.start_translation()

        assert session.translated_text == ""
        assert session.status is Status.TRANSLATING

    def test_chunks_accumulate(self):
        """Streamed chunks are appended in order."""
        session = Session()
        session.start_translation()

        session.append_chunk("你好")
        session.append_chunk("世界")

        assert session.translated_text == "你好世界"

    def test_result_clears_error(self):
        """A result replaces a previous error."""
        session = Session()
        session.set_error("Operation failed")

        session.set_result("done", "p")

        assert session.error is None
        assert session.status is Status.SUCCESS
        assert session.provider == "p"

    def test_duration_measured_from_capture(self):
        """A result after a capture records the run duration."""
        session = Session()
        session.start_capture()

        session.set_result("done")

        assert session.duration is not None and session.duration >= 0

    def test_clear_keeps_history(self):
        """clear resets the result but not the history."""
        session = Session()
        session.add_history(HistoryEntry(source="a", translated="b"))
        session.set_result("b", "p")

        session.clear()

        assert session.status is Status.IDLE
        assert session.translated_text == ""
        assert len(session.history) == 1


class TestPanes:
    """Tests for scattered panes."""

    def test_panes_scaled_and_pending(self):
        """Panes start pending with boxes divided by the scale factor."""
        session = Session()
        blocks = [TextBlock("a", BoundingBox(100, 50, 40, 20)), TextBlock("b", BoundingBox(100, 150, 41, 21))]

        panes = session.set_panes(blocks, scale_factor=2.0)

        assert [pane.index for pane in panes] == [0, 1]
        assert all(pane.status is PaneStatus.PENDING for pane in panes)
        assert panes[0].bbox == BoundingBox(50, 25, 20, 10)
        assert len({pane.id for pane in panes}) == 2

    def test_update_pane(self):
        """Updating a pane replaces its fields in place."""
        session = Session()
        pane = session.set_panes([TextBlock("a", BoundingBox(0, 0, 10, 10))])[0]

        updated = session.update_pane(pane.id, status=PaneStatus.DONE, translated_text="A")

        assert updated.translated_text == "A"
        assert session.get_pane(pane.id).status is PaneStatus.DONE

    def test_update_unknown_pane(self):
        """Unknown pane ids are ignored."""
        session = Session()

        assert session.update_pane("nope", status=PaneStatus.DONE) is None

    def test_clear_panes(self):
        """Clearing panes returns to unified layout."""
        session = Session()
        session.set_panes([TextBlock("a", BoundingBox(0, 0, 10, 10))])
        session.set_layout_mode(LayoutMode.SCATTERED)

        session.clear_panes()

        assert session.panes == []
        assert session.layout_mode is LayoutMode.UNIFIED


class TestHistory:
    """Tests for the in-memory history."""

    def test_newest_first(self):
        """New entries are prepended."""
        session = Session()
        session.add_history(HistoryEntry(source="1", translated="one"))
        session.add_history(HistoryEntry(source="2", translated="two"))

        assert [entry.source for entry in session.history] == ["2", "1"]

    def test_limit(self):
        """Entries beyond the limit are dropped from the end."""
        session = Session(history_limit=2)
        for index in range(3):
            session.add_history(HistoryEntry(source=str(index), translated=str(index)))

        assert [entry.source for entry in session.history] == ["2", "1"]

    def test_entries_have_ids(self):
        """Every entry gets its own id and timestamp."""
        first = HistoryEntry(source="a", translated="b")
        second = HistoryEntry(source="a", translated="b")

        assert first.id != second.id
        assert first.timestamp > 0

    def test_clear_history(self):
        """clear_history removes every entry."""
        session = Session()
        session.add_history(HistoryEntry(source="a", translated="b"))

        session.clear_history()

        assert session.history == []


class TestSubtitles:
    """Tests for subtitle state."""

    def test_previous_subtitle(self):
        """A different subtitle moves the current one to previous."""
        session = Session()
        session.set_subtitle("one")
        session.set_subtitle("two")

        assert (session.current_subtitle, session.previous_subtitle) == ("two", "one")

    def test_same_subtitle_keeps_previous(self):
        """Repeating the current subtitle does not overwrite previous."""
        session = Session()
        session.set_subtitle("one")
        session.set_subtitle("two")
        session.set_subtitle("two")

        assert session.previous_subtitle == "one"

    def test_clear_subtitle(self):
        """clear_subtitle resets text and counters."""
        session = Session()
        session.set_subtitle("one")
        session.record_subtitle_frame(skipped=True)

        session.clear_subtitle()

        assert session.current_subtitle == ""
        assert session.subtitle_stats.skipped == 0
