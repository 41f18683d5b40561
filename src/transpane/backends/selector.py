"""Candidate selection under the priority and privacy policies."""

from collections.abc import Sequence

from ..privacy import PrivacyMode, allows_network
from .base import UsageMode
from .registry import CapabilityRegistry


def candidates(
    registry: CapabilityRegistry,
    priority_override: Sequence[str] | None,
    privacy_mode: PrivacyMode,
    mode: UsageMode | str = UsageMode.NORMAL,
) -> list[str]:
    """Ordered adapter ids to try for one call.

    A non-empty override replaces the registry default for ``mode``. Ids of
    adapters that need the network are dropped when the privacy mode
    forbids it. Unknown ids pass through; the executor skips them.

    Args:
        registry: Registry of the adapter category.
        priority_override: User priority list, or None/empty for the default.
        privacy_mode: Current privacy mode.
        mode: Usage mode selecting the default list.

    Returns:
        Candidate ids, in order, without duplicates.
    """
    ids = list(priority_override) if priority_override else registry.default_priority(mode)
    network_ok = allows_network(privacy_mode)

    selected = []
    for adapter_id in ids:
        if adapter_id in selected:
            continue
        descriptor = registry.descriptor(adapter_id)
        if not network_ok and descriptor is not None and descriptor.requires_network:
            continue
        selected.append(adapter_id)
    return selected
