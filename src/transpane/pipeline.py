"""Translation pipeline: capture, OCR and translation.

The pipeline sequences one run at a time:

    idle -> capturing -> recognizing -> (skipped | translating) -> (success | error)

Recognized text with scattered geometry is translated block by block in
small concurrent batches; everything else is translated in one pass.
Errors are caught at the step that raised them and end the run in the
error state with a short message; nothing propagates to the caller.
"""

import asyncio
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from .backends.base import ChunkCallback, TextBlock, UsageMode
from .backends.fallback import Attempt
from .backends.manager import OCRManager, TranslationManager
from .cache import TranslationCache
from .capture import CaptureSource
from .config import Config
from .dedup import DedupCache, fingerprint
from .errors import CaptureFailure, RecognitionFailure, TranslationFailure, sanitize_message, short_error_message
from .layout import DEFAULT_THRESHOLDS, LayoutMode, LayoutThresholds, classify
from .log import get_logger
from .privacy import PrivacyMode, PrivacyProvider, StaticPrivacy, allows_cache, allows_history
from .session import HistoryEntry, LogicalBlock, PaneStatus, Session, Status, SubtitleStatus
from .text import clean_translation_output, detect_language, should_translate_text

logger = get_logger("pipeline")

CACHE_PROVIDER = "cache"


def _found_no_text(attempts: Sequence[Attempt]) -> bool:
    """Whether any failed OCR candidate reported an empty image."""
    return any(getattr(attempt.result, "no_text", False) for attempt in attempts)


def _describe(attempts: Sequence[Attempt]) -> list[str]:
    return [f"{attempt.adapter_id}: {attempt.error}" for attempt in attempts]


@dataclass
class PipelineResult:
    """Outcome of one pipeline run.

    ``skipped`` means the run stopped before any translation call.
    """

    success: bool
    text: str | None = None
    error: str | None = None
    provider: str | None = None
    engine: str | None = None
    mode: LayoutMode = LayoutMode.UNIFIED
    skipped: bool = False
    block_count: int | None = None


class Pipeline:
    """Runs capture, OCR and translation against injected collaborators.

    Callers must not start a run while another one is in flight; check
    ``busy`` first.
    """

    def __init__(
        self,
        translation: TranslationManager,
        ocr: OCRManager,
        config: Config | None = None,
        session: Session | None = None,
        privacy: PrivacyProvider | None = None,
        capture: CaptureSource | None = None,
        dedup: DedupCache | None = None,
        cache: TranslationCache | None = None,
        thresholds: LayoutThresholds = DEFAULT_THRESHOLDS,
    ):
        """Create a pipeline.

        Args:
            translation: Translation provider manager.
            ocr: OCR engine manager.
            config: Language, scale and concurrency settings.
            session: State container the run reports into.
            privacy: Source of the privacy mode, read once per run.
            capture: Capture source used by ``run_from_capture``.
            dedup: Duplicate input detector.
            cache: Translation cache, used when the privacy mode allows it.
            thresholds: Layout classification thresholds.
        """
        self.config = config or Config()
        self.translation = translation
        self.ocr = ocr
        self.session = session or Session(history_limit=self.config.history_limit)
        self.privacy = privacy or StaticPrivacy(self.config.privacy_mode)
        self.capture = capture
        self.dedup = dedup or DedupCache()
        self.cache = cache or TranslationCache(max_size=self.config.cache_size)
        self.thresholds = thresholds
        self._busy = False

    @classmethod
    def from_config(
        cls,
        config: Config,
        capture: CaptureSource | None = None,
        session: Session | None = None,
    ) -> "Pipeline":
        """Build a pipeline with the built-in backends configured from ``config``."""
        return cls(
            translation=TranslationManager(configs=config.providers, priority=config.translation_priority),
            ocr=OCRManager(configs=config.ocr_engines, priority=config.ocr_priority),
            config=config,
            session=session,
            capture=capture,
        )

    @property
    def busy(self) -> bool:
        """Whether a run is in flight."""
        return self._busy

    @contextmanager
    def _running(self) -> Iterator[None]:
        if self._busy:
            logger.warning("run started while another run is in flight")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    @property
    def usage_mode(self) -> UsageMode:
        try:
            return UsageMode(self.config.mode)
        except ValueError:
            return UsageMode.NORMAL

    def reset_cache(self) -> None:
        """Forget the last image and text so identical input runs again."""
        self.dedup.reset()

    async def aclose(self) -> None:
        await self.translation.aclose()
        await self.ocr.aclose()

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    async def run_from_capture(self, options: Mapping[str, Any] | None = None) -> PipelineResult:
        """Capture a fresh image, then recognize and translate it.

        Starting a capture clears the scattered panes and both dedup slots,
        so re-capturing an unchanged region still runs.
        """
        with self._running():
            privacy = self.privacy.get_mode()
            options = options or {}

            self.session.clear_panes()
            self.dedup.reset()
            self.session.start_capture()

            if self.capture is None:
                return self._fail(CaptureFailure("no capture source configured"), "capture")
            try:
                result = await self.capture.capture(options)
            except Exception as e:
                logger.exception("capture raised")
                return self._fail(e, "capture")

            if not result.success or not result.image_data:
                message = sanitize_message(result.error or "capture failed")
                logger.error("capture failed", error=result.error)
                self.session.set_error(message)
                return PipelineResult(success=False, error=message)

            return await self._from_image(result.image_data, options, privacy)

    async def run_from_image(self, image_data: str, options: Mapping[str, Any] | None = None) -> PipelineResult:
        """Recognize and translate an already captured image."""
        with self._running():
            return await self._from_image(image_data, options or {}, self.privacy.get_mode())

    async def run_from_text(
        self,
        text: str,
        stream: bool = False,
        on_chunk: ChunkCallback | None = None,
    ) -> PipelineResult:
        """Translate selected text.

        Args:
            text: Text to translate.
            stream: Report partial output as it arrives.
            on_chunk: Extra callback for partial output when streaming.

        Returns:
            PipelineResult in unified mode.
        """
        with self._running():
            privacy = self.privacy.get_mode()
            text = text.strip()
            if not text:
                return self._skip("empty text")
            self.session.set_layout_mode(LayoutMode.UNIFIED)
            self.session.set_source(text)
            return await self._translate_unified(text, privacy, stream=stream, on_chunk=on_chunk)

    async def process_subtitle_frame(self, image_data: str) -> PipelineResult:
        """Process one frame of continuous subtitle capture.

        Uses the subtitle priority lists, shows the translation as the
        current subtitle and always returns to listening.
        """
        with self._running():
            privacy = self.privacy.get_mode()
            try:
                return await self._subtitle_frame(image_data, privacy)
            except Exception as e:
                logger.exception("subtitle frame failed")
                return PipelineResult(success=False, error=short_error_message(e))
            finally:
                self.session.set_subtitle_status(SubtitleStatus.LISTENING)

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _fail(self, error: BaseException, context: str | None = None, engine: str | None = None) -> PipelineResult:
        message = short_error_message(error, context)
        self.session.set_error(message)
        return PipelineResult(success=False, error=message, engine=engine)

    def _skip(self, reason: str, engine: str | None = None) -> PipelineResult:
        logger.debug("run skipped", reason=reason)
        self.session.set_status(Status.SKIPPED)
        return PipelineResult(success=True, skipped=True, engine=engine)

    def _target_language(self, source_lang: str) -> str:
        """Configured target, swapped to the secondary language for same-language text."""
        target = self.config.target_language
        if not self.config.lock_target_language and source_lang == target:
            return self.config.secondary_language
        return target

    async def _from_image(self, image_data: str, options: Mapping[str, Any], privacy: PrivacyMode) -> PipelineResult:
        if self.dedup.check_and_update_image(fingerprint(image_data)):
            return self._skip("image unchanged")

        self.session.set_status(Status.RECOGNIZING)
        try:
            outcome = await self.ocr.recognize(image_data, privacy, self.usage_mode, options.get("ocr_options"))
        except Exception as e:
            logger.exception("ocr raised")
            return self._fail(e, "ocr")

        if not outcome.success:
            # An engine that ran but found nothing is not a failure
            if _found_no_text(outcome.attempts):
                return self._skip("no text recognized")
            logger.error("ocr failed", error=outcome.error, attempts=_describe(outcome.attempts))
            return self._fail(RecognitionFailure(outcome.error), "ocr")

        ocr_result = outcome.result
        engine = outcome.adapter_id
        text = ocr_result.text.strip()
        if self.dedup.check_and_update_text(text):
            return self._skip("text unchanged", engine)
        if not text:
            return self._skip("no text recognized", engine)

        self.session.set_source(text, engine)

        blocks = ocr_result.layout_blocks
        layout = classify(blocks, self.thresholds) if blocks else LayoutMode.UNIFIED
        logger.debug("layout decided", mode=layout.value, blocks=len(blocks or ()), engine=engine)

        if layout is LayoutMode.SCATTERED:
            return await self._translate_scattered(blocks, text, privacy, engine)

        self.session.set_layout_mode(LayoutMode.UNIFIED)
        return await self._translate_unified(text, privacy, engine=engine, fuzzy_cache=True)

    async def _translate_unified(
        self,
        text: str,
        privacy: PrivacyMode,
        engine: str | None = None,
        stream: bool = False,
        on_chunk: ChunkCallback | None = None,
        fuzzy_cache: bool = False,
    ) -> PipelineResult:
        self.session.start_translation()

        source_lang = detect_language(text)
        target_lang = self._target_language(source_lang)
        self.session.set_languages(source_lang, target_lang)

        if not should_translate_text(text):
            self.session.set_result(text)
            return PipelineResult(success=True, text=text, engine=engine)

        def emit(chunk: str) -> None:
            self.session.append_chunk(chunk)
            if on_chunk is not None:
                on_chunk(chunk)

        use_cache = allows_cache(privacy)
        cached = self.cache.get(text, source_lang, target_lang, fuzzy=fuzzy_cache) if use_cache else None
        if cached is not None:
            logger.debug("translation cache hit", chars=len(text))
            if stream:
                emit(cached)
            return self._finish_unified(text, cached, CACHE_PROVIDER, engine, privacy)

        try:
            outcome = await self.translation.translate(
                text,
                source_lang,
                target_lang,
                privacy,
                self.usage_mode,
                on_chunk=emit if stream else None,
            )
        except Exception as e:
            logger.exception("translation raised")
            return self._fail(e, "translation", engine)

        if not outcome.success:
            logger.error(
                "translation failed",
                error=outcome.error,
                attempts=_describe(outcome.attempts),
            )
            return self._fail(TranslationFailure(outcome.error), "translation", engine)

        raw = outcome.result.text
        translated = clean_translation_output(raw, text) or raw.strip()
        if use_cache:
            self.cache.put(text, source_lang, target_lang, translated)
        return self._finish_unified(text, translated, outcome.adapter_id, engine, privacy)

    def _finish_unified(
        self,
        source: str,
        translated: str,
        provider: str | None,
        engine: str | None,
        privacy: PrivacyMode,
    ) -> PipelineResult:
        self.session.set_result(translated, provider)
        if allows_history(privacy):
            self.session.add_history(HistoryEntry(
                source=source,
                translated=translated,
                provider=provider,
                source_lang=self.session.source_lang,
                target_lang=self.session.target_lang,
            ))
        return PipelineResult(success=True, text=translated, provider=provider, engine=engine)

    async def _translate_scattered(
        self,
        blocks: Sequence[TextBlock],
        text: str,
        privacy: PrivacyMode,
        engine: str | None,
    ) -> PipelineResult:
        valid = [block for block in blocks if block.text.strip() and block.has_geometry]
        if not valid:
            self.session.set_layout_mode(LayoutMode.UNIFIED)
            return await self._translate_unified(text, privacy, engine=engine, fuzzy_cache=True)

        self.session.set_layout_mode(LayoutMode.SCATTERED)
        try:
            panes = self.session.set_panes(valid, self.config.scale_factor)
        except Exception as e:
            logger.exception("pane setup failed", blocks=len(valid))
            return self._fail(e, engine=engine)
        self.session.start_translation()

        providers: dict[str, str | None] = {}
        limit = self.config.concurrency_limit
        for start in range(0, len(panes), limit):
            batch = panes[start:start + limit]
            results = await asyncio.gather(*(self._translate_pane(pane, privacy) for pane in batch))
            for pane, provider in zip(batch, results):
                providers[pane.id] = provider

        done = [pane for pane in self.session.panes if pane.status is PaneStatus.DONE]
        if not done:
            errors = [pane.error for pane in self.session.panes if pane.error]
            message = errors[0] if errors else short_error_message(TranslationFailure("no block translated"))
            self.session.set_error(message)
            return PipelineResult(
                success=False,
                error=message,
                engine=engine,
                mode=LayoutMode.SCATTERED,
                block_count=len(panes),
            )

        source = "\n".join(pane.source_text for pane in panes)
        translated = "\n".join(pane.translated_text for pane in self.session.panes if pane.translated_text)
        provider = next((p for p in providers.values() if p), None)

        self.session.set_result(translated, provider)
        if translated and allows_history(privacy):
            self.session.add_history(HistoryEntry(
                source=source,
                translated=translated,
                provider=provider,
                mode=LayoutMode.SCATTERED,
            ))

        logger.debug("scattered run complete", blocks=len(panes), translated=len(done))
        return PipelineResult(
            success=True,
            text=translated,
            provider=provider,
            engine=engine,
            mode=LayoutMode.SCATTERED,
            block_count=len(panes),
        )

    async def _translate_pane(self, pane: LogicalBlock, privacy: PrivacyMode) -> str | None:
        """Translate one pane, recording the outcome on the pane itself.

        Returns:
            The winning provider id, or None when no provider was used.
        """
        self.session.update_pane(pane.id, status=PaneStatus.TRANSLATING)
        text = pane.source_text.strip()
        try:
            if not should_translate_text(text):
                self.session.update_pane(pane.id, status=PaneStatus.DONE, translated_text=text)
                return None

            source_lang = detect_language(text)
            target_lang = self._target_language(source_lang)

            use_cache = allows_cache(privacy)
            cached = self.cache.get(text, source_lang, target_lang) if use_cache else None
            if cached is not None:
                self.session.update_pane(pane.id, status=PaneStatus.DONE, translated_text=cached)
                return CACHE_PROVIDER

            outcome = await self.translation.translate(text, source_lang, target_lang, privacy, UsageMode.NORMAL)
            if not outcome.success:
                logger.warning("block translation failed", index=pane.index, error=outcome.error)
                self.session.update_pane(
                    pane.id,
                    status=PaneStatus.ERROR,
                    error=short_error_message(TranslationFailure(outcome.error), "translation"),
                )
                return None

            raw = outcome.result.text
            translated = clean_translation_output(raw, text) or raw.strip()
            if use_cache:
                self.cache.put(text, source_lang, target_lang, translated)
            self.session.update_pane(pane.id, status=PaneStatus.DONE, translated_text=translated)
            return outcome.adapter_id
        except Exception as e:
            logger.exception("block translation raised", index=pane.index)
            self.session.update_pane(pane.id, status=PaneStatus.ERROR, error=short_error_message(e, "translation"))
            return None

    async def _subtitle_frame(self, image_data: str, privacy: PrivacyMode) -> PipelineResult:
        if self.dedup.check_and_update_image(fingerprint(image_data)):
            self.session.record_subtitle_frame(skipped=True)
            return PipelineResult(success=True, skipped=True)

        self.session.set_subtitle_status(SubtitleStatus.RECOGNIZING)
        outcome = await self.ocr.recognize(image_data, privacy, UsageMode.SUBTITLE)
        if not outcome.success:
            if _found_no_text(outcome.attempts):
                return PipelineResult(success=True, skipped=True)
            logger.warning("subtitle ocr failed", error=outcome.error)
            return PipelineResult(success=False, error=short_error_message(RecognitionFailure(outcome.error), "ocr"))

        engine = outcome.adapter_id
        text = outcome.result.text.strip()
        if not text or self.dedup.check_and_update_text(text):
            self.session.record_subtitle_frame(skipped=True)
            return PipelineResult(success=True, skipped=True, engine=engine)

        if not should_translate_text(text):
            return PipelineResult(success=True, text=text, engine=engine)

        self.session.set_subtitle_status(SubtitleStatus.TRANSLATING)
        source_lang = detect_language(text)
        target_lang = self._target_language(source_lang)
        translated_outcome = await self.translation.translate(
            text, source_lang, target_lang, privacy, UsageMode.SUBTITLE
        )
        if not translated_outcome.success:
            logger.warning("subtitle translation failed", error=translated_outcome.error)
            return PipelineResult(
                success=False,
                error=short_error_message(TranslationFailure(translated_outcome.error), "translation"),
                engine=engine,
            )

        raw = translated_outcome.result.text
        translated = clean_translation_output(raw, text) or raw.strip()
        self.session.set_subtitle(translated)
        self.session.record_subtitle_frame(skipped=False)
        return PipelineResult(
            success=True,
            text=translated,
            provider=translated_outcome.adapter_id,
            engine=engine,
        )
