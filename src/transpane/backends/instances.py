"""Lazily created, configured adapter instances."""

from collections.abc import Mapping
from typing import Any

from ..log import get_logger
from .base import Adapter
from .registry import CapabilityRegistry

logger = get_logger("instances")


class AdapterInstanceCache:
    """Holds one live adapter instance per id plus its stored configuration.

    Instances are created on first use from the registry class with the
    descriptor defaults overlaid by the stored fields. Configuration updates
    for an id are merged into the stored fields and pushed into its live
    instance; other ids are never touched.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        configs: Mapping[str, Mapping[str, Any]] | None = None,
    ):
        self._registry = registry
        self._configs: dict[str, dict[str, Any]] = {
            adapter_id: dict(fields) for adapter_id, fields in (configs or {}).items()
        }
        self._instances: dict[str, Adapter] = {}

    def stored_config(self, adapter_id: str) -> dict[str, Any]:
        """User-supplied fields for an id, without defaults."""
        return dict(self._configs.get(adapter_id, {}))

    def merged_config(self, adapter_id: str) -> dict[str, Any]:
        """Descriptor defaults overlaid with the stored fields."""
        descriptor = self._registry.descriptor(adapter_id)
        defaults = descriptor.defaults() if descriptor else {}
        return {**defaults, **self._configs.get(adapter_id, {})}

    def get_or_create(self, adapter_id: str) -> Adapter | None:
        """Return the live instance for an id, creating it if needed.

        Returns:
            The instance, or None for an unknown id or a failed constructor.
        """
        instance = self._instances.get(adapter_id)
        if instance is not None:
            return instance

        adapter_class = self._registry.get(adapter_id)
        if adapter_class is None:
            logger.debug("unknown adapter", category=self._registry.category, id=adapter_id)
            return None

        try:
            instance = adapter_class(self.merged_config(adapter_id), self._registry.descriptor(adapter_id))
        except Exception as e:
            logger.error("adapter construction failed", id=adapter_id, error=str(e))
            return None

        self._instances[adapter_id] = instance
        logger.debug("adapter created", category=self._registry.category, id=adapter_id)
        return instance

    def peek(self, adapter_id: str) -> Adapter | None:
        """Return the live instance for an id without creating one."""
        return self._instances.get(adapter_id)

    def update_config(self, adapter_id: str, partial: Mapping[str, Any]) -> None:
        """Merge fields into an id's stored configuration and its live instance."""
        self._configs[adapter_id] = {**self._configs.get(adapter_id, {}), **partial}
        instance = self._instances.get(adapter_id)
        if instance is not None:
            instance.update_config(self.merged_config(adapter_id))

    def load(self, configs: Mapping[str, Mapping[str, Any]]) -> None:
        """Replace all stored configuration and drop every instance."""
        self._configs = {adapter_id: dict(fields) for adapter_id, fields in configs.items()}
        self.clear()

    def export(self) -> dict[str, dict[str, Any]]:
        return {adapter_id: dict(fields) for adapter_id, fields in self._configs.items()}

    def clear(self) -> None:
        """Drop all live instances; they are recreated on next use."""
        self._instances.clear()

    async def aclose(self) -> None:
        """Close every live instance and drop it."""
        for instance in list(self._instances.values()):
            await instance.aclose()
        self.clear()
