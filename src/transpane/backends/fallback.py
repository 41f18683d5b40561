"""Ordered fallback across candidate adapters."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ..errors import dominant_error, sanitize_message
from ..log import get_logger
from .base import Adapter
from .instances import AdapterInstanceCache

logger = get_logger("fallback")

R = TypeVar("R")


@dataclass
class Attempt:
    """One candidate that was called and did not succeed.

    Attributes:
        adapter_id: Id of the candidate.
        error: Failure reason, from the result or the raised exception.
        raised: True if the call raised instead of returning ``success=False``.
        result: The returned result, when the call did not raise.
    """

    adapter_id: str
    error: str
    raised: bool = False
    result: Any = None


@dataclass
class FallbackOutcome(Generic[R]):
    """Result of running an operation over a candidate list."""

    success: bool
    result: R | None = None
    adapter_id: str | None = None
    error: str | None = None
    attempts: list[Attempt] = field(default_factory=list)

    @property
    def tried(self) -> list[str]:
        """Ids of the candidates that were called, in order."""
        ids = [attempt.adapter_id for attempt in self.attempts]
        if self.success and self.adapter_id is not None:
            ids.append(self.adapter_id)
        return ids


class FallbackExecutor:
    """Tries candidates in order until one succeeds.

    A candidate is skipped when the instance cache cannot produce it or it
    reports itself unavailable. A raised exception and a ``success=False``
    result are both treated as failure and move on to the next candidate.
    Every candidate is called at most once per run, with no retry delay.
    """

    def __init__(self, instances: AdapterInstanceCache, label: str = "backend"):
        """Create an executor.

        Args:
            instances: Cache producing configured adapter instances.
            label: Noun used in exhaustion messages, e.g. "translation provider".
        """
        self._instances = instances
        self._label = label

    async def run(
        self,
        candidates: Sequence[str],
        operation: Callable[[Adapter], Awaitable[R]],
    ) -> FallbackOutcome[R]:
        """Run ``operation`` on each candidate until one succeeds.

        Args:
            candidates: Ordered adapter ids.
            operation: Coroutine function taking an adapter instance and
                returning a result with ``success`` and ``error`` attributes.

        Returns:
            FallbackOutcome with the winning result and id, or a failure
            whose error lists the ids that were tried and the failure
            reason most of them share.
        """
        attempts: list[Attempt] = []
        seen: set[str] = set()

        for adapter_id in candidates:
            if adapter_id in seen:
                continue
            seen.add(adapter_id)

            instance = self._instances.get_or_create(adapter_id)
            if instance is None:
                continue
            if not instance.is_available():
                logger.debug("skipping unavailable candidate", id=adapter_id)
                continue

            logger.debug("trying candidate", id=adapter_id)
            try:
                result = await operation(instance)
            except Exception as e:
                logger.warning("candidate raised", id=adapter_id, error=str(e) or type(e).__name__)
                attempts.append(Attempt(adapter_id, str(e) or type(e).__name__, raised=True))
                continue

            if getattr(result, "success", False):
                return FallbackOutcome(success=True, result=result, adapter_id=adapter_id, attempts=attempts)

            error = getattr(result, "error", None) or "unknown error"
            logger.warning("candidate failed", id=adapter_id, error=error)
            attempts.append(Attempt(adapter_id, error, raised=False, result=result))

        if not attempts:
            return FallbackOutcome(success=False, error=f"no {self._label} available", attempts=attempts)

        tried = ", ".join(attempt.adapter_id for attempt in attempts)
        cause = sanitize_message(dominant_error([attempt.error for attempt in attempts]) or "")
        error = f"all {self._label}s failed (tried: {tried})"
        if cause:
            error = f"{error}: {cause}"
        return FallbackOutcome(success=False, error=error, attempts=attempts)
