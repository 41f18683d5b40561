"""Tests for the translation pipeline."""

import asyncio

from fakes import InFlightTracker, make_ocr_manager, make_translation_manager

from transpane.capture import CallableCapture, CaptureResult
from transpane.config import Config
from transpane.layout import LayoutMode
from transpane.pipeline import CACHE_PROVIDER, Pipeline
from transpane.privacy import PrivacyMode, StaticPrivacy
from transpane.session import PaneStatus, Status, SubtitleStatus

IMAGE_A = "aW1hZ2UtYQ=="
IMAGE_B = "aW1hZ2UtYg=="

# Five lines far apart vertically
SCATTERED_BLOCKS = [
    (word, 10, index * 100, 120, 20)
    for index, word in enumerate(["apple", "river", "mountain", "yellow", "keyboard"])
]


def make_pipeline(
    translators=("P",),
    engines=("E",),
    translator_configs=None,
    engine_configs=None,
    privacy=PrivacyMode.STANDARD,
    capture=None,
    translator_options=None,
    engine_options=None,
    **config_values,
):
    translation = make_translation_manager(translators, translator_configs, **(translator_options or {}))
    ocr = make_ocr_manager(engines, engine_configs, **(engine_options or {}))
    return Pipeline(
        translation=translation,
        ocr=ocr,
        config=Config(**config_values),
        privacy=StaticPrivacy(privacy),
        capture=capture,
    )


def ocr_text(text, blocks=None):
    return {"E": {"text": text, "blocks": blocks}}


class TestUnifiedRun:
    """Tests for single-pane translation of a recognized image."""

    def test_end_to_end_unified(self):
        """One block of English text is translated to Chinese and recorded."""
        pipeline = make_pipeline(
            translator_configs={"P": {"output": "你好世界"}},
            engine_configs=ocr_text("Hello world", [("Hello world", 10, 10, 200, 20)]),
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.success
        assert result.text == "你好世界"
        assert result.provider == "P"
        assert result.engine == "E"
        assert result.mode is LayoutMode.UNIFIED
        session = pipeline.session
        assert session.status is Status.SUCCESS
        assert session.source_text == "Hello world"
        assert session.translated_text == "你好世界"
        assert (session.source_lang, session.target_lang) == ("en", "zh")
        assert len(session.history) == 1
        entry = session.history[0]
        assert (entry.source, entry.translated, entry.provider) == ("Hello world", "你好世界", "P")

    def test_same_image_twice_is_skipped(self):
        """A repeated image stops before OCR and translation."""
        pipeline = make_pipeline(engine_configs=ocr_text("Hello world"))

        first = asyncio.run(pipeline.run_from_image(IMAGE_A))
        second = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert first.success and not first.skipped
        assert second.success and second.skipped
        assert pipeline.session.status is Status.SKIPPED
        assert pipeline.ocr.instances.peek("E").calls == 1
        assert len(pipeline.translation.instances.peek("P").calls) == 1

    def test_same_text_from_new_image_is_skipped(self):
        """A new image recognizing the previous text skips translation."""
        pipeline = make_pipeline(engine_configs=ocr_text("Hello world"))

        asyncio.run(pipeline.run_from_image(IMAGE_A))
        result = asyncio.run(pipeline.run_from_image(IMAGE_B))

        assert result.skipped
        assert result.engine == "E"
        assert pipeline.ocr.instances.peek("E").calls == 2
        assert len(pipeline.translation.instances.peek("P").calls) == 1

    def test_reset_cache_allows_identical_input(self):
        """After reset_cache the same image runs again."""
        pipeline = make_pipeline(engine_configs=ocr_text("Hello world"))

        asyncio.run(pipeline.run_from_image(IMAGE_A))
        pipeline.reset_cache()
        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert not result.skipped
        assert pipeline.ocr.instances.peek("E").calls == 2

    def test_blank_recognition_is_skipped(self):
        """OCR that succeeds with blank text ends the run as skipped."""
        pipeline = make_pipeline(engine_configs=ocr_text("   "))

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.success and result.skipped
        assert pipeline.translation.instances.peek("P") is None

    def test_engine_reporting_no_text_is_skipped(self):
        """An engine that found nothing is a skip, not an error."""
        pipeline = make_pipeline(engine_configs={"E": {"behaviour": "empty"}})

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.success and result.skipped
        assert pipeline.session.status is Status.SKIPPED

    def test_ocr_failure_ends_in_error(self):
        """Every engine failing gives a short recognition error."""
        pipeline = make_pipeline(
            engines=("E", "F"),
            engine_configs={"E": {"behaviour": "fail"}, "F": {"behaviour": "raise"}},
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert not result.success
        assert result.error.startswith("Recognition failed")
        assert pipeline.session.status is Status.ERROR
        assert pipeline.session.error == result.error
        assert pipeline.session.history == []

    def test_ocr_falls_back_to_next_engine(self):
        """A failing engine is followed by the next one in priority order."""
        pipeline = make_pipeline(
            engines=("E", "F"),
            engine_configs={"E": {"behaviour": "raise"}, "F": {"text": "Hello world"}},
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.success
        assert result.engine == "F"
        assert pipeline.session.engine == "F"

    def test_translation_falls_back_to_next_provider(self):
        """A raising provider is followed by the next provider."""
        pipeline = make_pipeline(
            translators=("P", "Q"),
            translator_configs={"P": {"behaviour": "raise"}, "Q": {"prefix": "Q"}},
            engine_configs=ocr_text("Hello world"),
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.success
        assert result.provider == "Q"
        assert result.text == "Q:Hello world"
        assert len(pipeline.translation.instances.peek("P").calls) == 1

    def test_all_providers_failing_ends_in_error(self):
        """Exhausted providers end the run with one short message and no history."""
        pipeline = make_pipeline(
            translators=("P", "Q"),
            translator_configs={"P": {"behaviour": "fail"}, "Q": {"behaviour": "raise", "error": "HTTP 401: bad key"}},
            engine_configs=ocr_text("Hello world"),
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert not result.success
        assert result.engine == "E"
        assert "\n" not in result.error
        assert result.error == "Invalid API key: the API key is missing or rejected"
        assert pipeline.session.status is Status.ERROR
        assert pipeline.session.history == []

    def test_all_providers_timing_out(self):
        """Providers that all time out report a timeout rather than a generic failure."""
        timeout = {"behaviour": "raise", "error": "request to http://localhost timed out after 15s"}
        pipeline = make_pipeline(
            translators=("P", "Q"),
            translator_configs={"P": timeout, "Q": timeout},
            engine_configs=ocr_text("Hello world"),
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.error == "Request timed out: the service took too long to respond"
        assert pipeline.session.error == result.error

    def test_same_language_swaps_to_secondary(self):
        """Text already in the target language is translated to the secondary one."""
        pipeline = make_pipeline(engine_configs=ocr_text("你好世界"))

        asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert pipeline.translation.instances.peek("P").calls == [("你好世界", "zh", "en")]

    def test_locked_target_is_not_swapped(self):
        """With the target locked, same-language text keeps the target."""
        pipeline = make_pipeline(engine_configs=ocr_text("你好世界"), lock_target_language=True)

        asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert pipeline.translation.instances.peek("P").calls == [("你好世界", "zh", "zh")]

    def test_untranslatable_text_is_shown_as_is(self):
        """Numbers and symbols are returned without a provider call."""
        pipeline = make_pipeline(engine_configs=ocr_text("12:30 - 45%"))

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.success
        assert result.text == "12:30 - 45%"
        assert result.provider is None
        assert pipeline.translation.instances.peek("P") is None

    def test_status_transitions(self):
        """A capture run reports every status in order."""
        pipeline = make_pipeline(
            engine_configs=ocr_text("Hello world"),
            capture=CallableCapture(self._capture_a),
        )
        statuses = []
        pipeline.session.add_listener(
            lambda change, session: statuses.append(session.status) if change == "status" else None
        )

        asyncio.run(pipeline.run_from_capture())

        assert statuses == [Status.CAPTURING, Status.RECOGNIZING, Status.TRANSLATING, Status.SUCCESS]
        assert not pipeline.busy

    @staticmethod
    async def _capture_a(options):
        return IMAGE_A


class TestScatteredRun:
    """Tests for per-block translation of scattered layouts."""

    def test_blocks_translated_with_bounded_concurrency(self):
        """Five blocks are translated two at a time, never more."""
        tracker = InFlightTracker()
        pipeline = make_pipeline(
            translator_configs={"P": {"tracker": tracker, "delay": 0.01}},
            engine_configs=ocr_text("apple river mountain yellow keyboard", SCATTERED_BLOCKS),
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.success
        assert result.mode is LayoutMode.SCATTERED
        assert result.block_count == 5
        assert tracker.total == 5
        assert tracker.peak == 2
        panes = pipeline.session.panes
        assert [pane.status for pane in panes] == [PaneStatus.DONE] * 5
        assert [pane.translated_text for pane in panes] == [
            "T:apple", "T:river", "T:mountain", "T:yellow", "T:keyboard"
        ]
        assert pipeline.session.layout_mode is LayoutMode.SCATTERED

    def test_concurrency_limit_is_configurable(self):
        """A limit of one translates blocks strictly in sequence."""
        tracker = InFlightTracker()
        pipeline = make_pipeline(
            translator_configs={"P": {"tracker": tracker, "delay": 0.005}},
            engine_configs=ocr_text("blocks", SCATTERED_BLOCKS),
            concurrency_limit=1,
        )

        asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert tracker.peak == 1

    def test_one_history_entry_per_run(self):
        """A scattered run records a single combined history entry."""
        pipeline = make_pipeline(engine_configs=ocr_text("blocks", SCATTERED_BLOCKS[:2]))

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert len(pipeline.session.history) == 1
        entry = pipeline.session.history[0]
        assert entry.mode is LayoutMode.SCATTERED
        assert entry.source == "apple\nriver"
        assert entry.translated == "T:apple\nT:river"
        assert result.text == entry.translated

    def test_pane_boxes_are_scaled(self):
        """Pane boxes are converted to UI pixels with the scale factor."""
        pipeline = make_pipeline(engine_configs=ocr_text("blocks", SCATTERED_BLOCKS[:2]), scale_factor=2.0)

        asyncio.run(pipeline.run_from_image(IMAGE_A))

        second = pipeline.session.panes[1].bbox
        assert (second.x, second.y, second.width, second.height) == (5, 50, 60, 10)

    def test_zero_scale_factor_from_config(self):
        """A configured scale factor of zero is treated as 1.0."""
        pipeline = make_pipeline(engine_configs=ocr_text("blocks", SCATTERED_BLOCKS[:2]), scale_factor=0)

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.success
        second = pipeline.session.panes[1].bbox
        assert (second.x, second.y, second.width, second.height) == (10, 100, 120, 20)

    def test_pane_setup_failure_ends_in_error(self):
        """A pane that cannot be placed ends the run in error instead of raising."""
        pipeline = make_pipeline(engine_configs=ocr_text("blocks", SCATTERED_BLOCKS[:2]))
        pipeline.config.scale_factor = 0

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert not result.success
        assert result.error == "Operation failed: an unexpected error occurred"
        assert pipeline.session.status is Status.ERROR
        assert pipeline.translation.instances.peek("P") is None

    def test_partial_failure_keeps_other_panes(self):
        """A failing block is marked as error while the rest succeed."""
        pipeline = make_pipeline(
            translator_configs={"P": {"fail_on": ["river"]}},
            engine_configs=ocr_text("blocks", SCATTERED_BLOCKS[:3]),
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.success
        statuses = [pane.status for pane in pipeline.session.panes]
        assert statuses == [PaneStatus.DONE, PaneStatus.ERROR, PaneStatus.DONE]
        assert pipeline.session.panes[1].error
        assert result.text == "T:apple\nT:mountain"

    def test_all_panes_failing_is_an_error(self):
        """The run fails when no block could be translated."""
        pipeline = make_pipeline(
            translator_configs={"P": {"behaviour": "raise"}},
            engine_configs=ocr_text("blocks", SCATTERED_BLOCKS[:3]),
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert not result.success
        assert result.mode is LayoutMode.SCATTERED
        assert pipeline.session.status is Status.ERROR
        assert all(pane.status is PaneStatus.ERROR for pane in pipeline.session.panes)
        assert pipeline.session.history == []

    def test_raw_blocks_decide_layout(self):
        """Un-merged lines are used for layout when the engine provides them."""
        merged = [("apple\nriver", 10, 0, 120, 120)]
        pipeline = make_pipeline(
            engine_configs={"E": {"text": "apple\nriver", "blocks": merged, "raw_blocks": SCATTERED_BLOCKS[:2]}},
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.mode is LayoutMode.SCATTERED
        assert len(pipeline.session.panes) == 2

    def test_capture_clears_previous_panes(self):
        """Starting a capture drops the panes of the previous run."""
        pipeline = make_pipeline(
            engine_configs=ocr_text("blocks", SCATTERED_BLOCKS[:2]),
            capture=CallableCapture(self._capture_a),
        )
        asyncio.run(pipeline.run_from_image(IMAGE_B))
        assert pipeline.session.panes
        cleared = []
        pipeline.session.add_listener(
            lambda change, session: cleared.append(list(session.panes)) if change == "panes" else None
        )

        asyncio.run(pipeline.run_from_capture())

        assert cleared[0] == []

    @staticmethod
    async def _capture_a(options):
        return IMAGE_A


class TestPrivacy:
    """Tests for privacy modes in pipeline runs."""

    def test_offline_skips_network_providers(self):
        """Offline mode never creates an adapter that needs the network."""
        pipeline = make_pipeline(
            translators=("N", "L"),
            translator_configs={"L": {"prefix": "L"}},
            translator_options={"network": ("N",)},
            engine_configs=ocr_text("Hello world"),
            privacy=PrivacyMode.OFFLINE,
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.provider == "L"
        assert pipeline.translation.instances.peek("N") is None

    def test_offline_without_local_provider_fails(self):
        """With only network providers, offline runs fail without calling any."""
        pipeline = make_pipeline(
            translator_options={"network": ("P",)},
            engine_configs=ocr_text("Hello world"),
            privacy=PrivacyMode.STRICT,
        )

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert not result.success
        assert pipeline.translation.instances.peek("P") is None

    def test_standard_mode_uses_cache(self):
        """A repeated text is served from the cache."""
        pipeline = make_pipeline()

        asyncio.run(pipeline.run_from_text("Hello world"))
        result = asyncio.run(pipeline.run_from_text("Hello world"))

        assert result.provider == CACHE_PROVIDER
        assert result.text == "T:Hello world"
        assert len(pipeline.translation.instances.peek("P").calls) == 1
        assert len(pipeline.session.history) == 2

    def test_secure_mode_records_nothing(self):
        """Secure mode writes neither history nor cache."""
        pipeline = make_pipeline(privacy=PrivacyMode.SECURE)

        asyncio.run(pipeline.run_from_text("Hello world"))
        result = asyncio.run(pipeline.run_from_text("Hello world"))

        assert result.provider == "P"
        assert len(pipeline.translation.instances.peek("P").calls) == 2
        assert pipeline.session.history == []
        assert len(pipeline.cache) == 0

    def test_mode_is_read_per_run(self):
        """Switching the privacy mode applies to the next run."""
        pipeline = make_pipeline()
        pipeline.privacy.set_mode(PrivacyMode.STRICT)

        asyncio.run(pipeline.run_from_text("Hello world"))

        assert pipeline.session.history == []


class TestCacheLookup:
    """Tests for how runs consult the translation cache."""

    def test_selected_text_needs_exact_match(self):
        """Near-identical selected texts are translated separately."""
        pipeline = make_pipeline()

        asyncio.run(pipeline.run_from_text("Page 10 of 12"))
        result = asyncio.run(pipeline.run_from_text("Page 11 of 12"))

        assert result.provider == "P"
        assert result.text == "T:Page 11 of 12"

    def test_selected_text_ignores_similar_wording(self):
        """Similar wording without numbers is not served from the cache either."""
        pipeline = make_pipeline()

        asyncio.run(pipeline.run_from_text("The quick brown fox jumps over the lazy dog"))
        result = asyncio.run(pipeline.run_from_text("The quick brown fox jumps over the lazy dog."))

        assert result.provider == "P"
        assert len(pipeline.translation.instances.peek("P").calls) == 2

    def test_recognized_text_tolerates_noise(self):
        """OCR text one character off a cached text hits the cache."""
        pipeline = make_pipeline(engine_configs=ocr_text("The quick brown fox jumps over the lazy dog."))
        pipeline.cache.put("The quick brown fox jumps over the lazy dog", "en", "zh", "敏捷的狐狸")

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.provider == CACHE_PROVIDER
        assert result.text == "敏捷的狐狸"
        assert pipeline.translation.instances.peek("P") is None

    def test_recognized_text_with_other_numbers(self):
        """OCR text differing only in a number is translated again."""
        pipeline = make_pipeline(engine_configs=ocr_text("Page 11 of 12"))
        pipeline.cache.put("Page 10 of 12", "en", "zh", "第10页")

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.provider == "P"
        assert result.text == "T:Page 11 of 12"

    def test_scattered_labels_need_exact_match(self):
        """Scattered panes never reuse the translation of a similar label."""
        blocks = [("Settings saved", 10, 0, 200, 20), ("Profile updated", 10, 300, 200, 20)]
        pipeline = make_pipeline(engine_configs=ocr_text("Settings saved\nProfile updated", blocks))
        pipeline.cache.put("Settings saved!", "en", "zh", "wrong")

        result = asyncio.run(pipeline.run_from_image(IMAGE_A))

        assert result.mode is LayoutMode.SCATTERED
        assert [pane.translated_text for pane in pipeline.session.panes] == [
            "T:Settings saved",
            "T:Profile updated",
        ]


class TestTextRun:
    """Tests for translating selected text."""

    def test_streaming_provider_reports_chunks(self):
        """Streamed chunks reach the callback and build up the session text."""
        pipeline = make_pipeline(
            translators=("S",),
            translator_configs={"S": {"output": "你好 世界"}},
            translator_options={"streaming": ("S",)},
        )
        chunks = []

        result = asyncio.run(pipeline.run_from_text("Hello world", stream=True, on_chunk=chunks.append))

        assert chunks == ["你好", " 世界"]
        assert result.text == "你好 世界"
        assert pipeline.session.translated_text == "你好 世界"

    def test_non_streaming_provider_reports_one_chunk(self):
        """A provider without streaming delivers the whole text once."""
        pipeline = make_pipeline()
        chunks = []

        asyncio.run(pipeline.run_from_text("Hello world", stream=True, on_chunk=chunks.append))

        assert chunks == ["T:Hello world"]

    def test_no_chunks_without_streaming(self):
        """Without stream the callback is never called."""
        pipeline = make_pipeline()
        chunks = []

        asyncio.run(pipeline.run_from_text("Hello world", on_chunk=chunks.append))

        assert chunks == []

    def test_empty_text_is_skipped(self):
        """Blank input makes no provider call."""
        pipeline = make_pipeline()

        result = asyncio.run(pipeline.run_from_text("   "))

        assert result.success and result.skipped
        assert pipeline.translation.instances.peek("P") is None

    def test_text_runs_ignore_dedup(self):
        """Selected text is translated every time it is submitted."""
        pipeline = make_pipeline(privacy=PrivacyMode.SECURE)

        asyncio.run(pipeline.run_from_text("Hello world"))
        result = asyncio.run(pipeline.run_from_text("Hello world"))

        assert not result.skipped


class TestCapture:
    """Tests for capture failures."""

    def test_cancelled_capture(self):
        """A capture returning nothing ends the run in error."""

        async def cancelled(options):
            return None

        pipeline = make_pipeline(capture=CallableCapture(cancelled))

        result = asyncio.run(pipeline.run_from_capture())

        assert not result.success
        assert result.error == "capture cancelled"
        assert pipeline.session.status is Status.ERROR
        assert pipeline.ocr.instances.peek("E") is None

    def test_failed_capture_message_is_trimmed(self):
        """Capture error messages keep only their first line."""

        async def failing(options):
            return CaptureResult(success=False, error="permission denied\nstack trace line")

        pipeline = make_pipeline(capture=CallableCapture(failing))

        result = asyncio.run(pipeline.run_from_capture())

        assert result.error == "permission denied"

    def test_raising_capture(self):
        """An exception from the capture source becomes a capture error."""

        async def broken(options):
            raise RuntimeError("display unavailable")

        pipeline = make_pipeline(capture=CallableCapture(broken))

        result = asyncio.run(pipeline.run_from_capture())

        assert not result.success
        assert result.error.startswith("Capture")
        assert not pipeline.busy

    def test_missing_capture_source(self):
        """Capturing without a source fails cleanly."""
        pipeline = make_pipeline()

        result = asyncio.run(pipeline.run_from_capture())

        assert not result.success
        assert pipeline.session.status is Status.ERROR

    def test_capture_options_reach_source(self):
        """Options passed to run_from_capture are forwarded to the source."""
        received = []

        async def recording(options):
            received.append(options)
            return IMAGE_A

        pipeline = make_pipeline(engine_configs=ocr_text("Hello world"), capture=CallableCapture(recording))

        asyncio.run(pipeline.run_from_capture({"region": (0, 0, 10, 10)}))

        assert received == [{"region": (0, 0, 10, 10)}]


class TestSubtitleFrames:
    """Tests for continuous subtitle processing."""

    def _pipeline(self, **kwargs):
        return make_pipeline(
            translators=("A", "B"),
            translator_configs={"A": {"prefix": "A"}, "B": {"prefix": "B"}},
            translator_options={"subtitle": ("B", "A")},
            engine_configs=ocr_text("Hello world"),
            **kwargs,
        )

    def test_frame_uses_subtitle_priority(self):
        """Subtitle frames use the subtitle priority list."""
        pipeline = self._pipeline()

        result = asyncio.run(pipeline.process_subtitle_frame(IMAGE_A))

        assert result.provider == "B"
        assert pipeline.session.current_subtitle == "B:Hello world"
        assert pipeline.session.subtitle_stats.processed == 1
        assert pipeline.session.subtitle_status is SubtitleStatus.LISTENING

    def test_unchanged_frame_is_skipped(self):
        """A repeated frame is counted as skipped."""
        pipeline = self._pipeline()

        asyncio.run(pipeline.process_subtitle_frame(IMAGE_A))
        result = asyncio.run(pipeline.process_subtitle_frame(IMAGE_A))

        assert result.skipped
        assert pipeline.session.subtitle_stats.skipped == 1
        assert pipeline.session.subtitle_stats.processed == 1

    def test_previous_subtitle_is_kept(self):
        """A new subtitle moves the current one to previous."""
        pipeline = self._pipeline()

        asyncio.run(pipeline.process_subtitle_frame(IMAGE_A))
        pipeline.ocr.update_config("E", {"text": "Good night"})
        asyncio.run(pipeline.process_subtitle_frame(IMAGE_B))

        assert pipeline.session.current_subtitle == "B:Good night"
        assert pipeline.session.previous_subtitle == "B:Hello world"

    def test_failed_frame_returns_to_listening(self):
        """Translation failure still leaves the subtitle state listening."""
        pipeline = self._pipeline(privacy=PrivacyMode.STANDARD)
        pipeline.translation.update_config("A", {"behaviour": "fail"})
        pipeline.translation.update_config("B", {"behaviour": "fail"})

        result = asyncio.run(pipeline.process_subtitle_frame(IMAGE_A))

        assert not result.success
        assert pipeline.session.subtitle_status is SubtitleStatus.LISTENING
        assert pipeline.session.current_subtitle == ""
