"""Batch execution of manifest operations.

Provides the dispatching shared by the install, update and remove
commands: every manifest is processed in turn, a failing manifest is
recorded and the batch continues with the rest.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from homebins.core.errors import HomebinsError
from homebins.models.action import ActionResult, ActionType

if TYPE_CHECKING:
    from homebins.core.engine import ManifestEngine
    from homebins.models.manifest import Manifest

logger = logging.getLogger(__name__)


def _install(engine: ManifestEngine, manifest: Manifest) -> ActionResult:
    paths = engine.install(manifest)
    return ActionResult(
        action_type=ActionType.INSTALL,
        name=manifest.name,
        success=True,
        changed=True,
        paths=tuple(paths),
        message=f"Installed {manifest.version}",
    )


def _update(engine: ManifestEngine, manifest: Manifest) -> ActionResult:
    result = engine.update(manifest)
    if not result.changed:
        message = f"Up to date ({manifest.version})"
    elif result.status.installed_version is None:
        message = f"Installed {manifest.version}"
    else:
        message = f"Updated {result.status.installed_version} -> {manifest.version}"
    return ActionResult(
        action_type=ActionType.UPDATE,
        name=manifest.name,
        success=True,
        changed=result.changed,
        paths=result.paths,
        message=message,
    )


def _remove(engine: ManifestEngine, manifest: Manifest) -> ActionResult:
    paths = engine.remove(manifest)
    message = f"Removed {len(paths)} file(s)" if paths else "Nothing to remove"
    return ActionResult(
        action_type=ActionType.REMOVE,
        name=manifest.name,
        success=True,
        changed=bool(paths),
        paths=tuple(paths),
        message=message,
    )


OPERATIONS: dict[ActionType, Callable[[ManifestEngine, Manifest], ActionResult]] = {
    ActionType.INSTALL: _install,
    ActionType.UPDATE: _update,
    ActionType.REMOVE: _remove,
}


def execute_action(
    engine: ManifestEngine,
    action_type: ActionType,
    manifest: Manifest,
) -> ActionResult:
    """Execute one operation on one manifest, capturing failures.

    Args:
        engine: Engine to execute with.
        action_type: Operation to execute.
        manifest: Manifest to operate on.

    Returns:
        ActionResult describing success or the error.
    """
    try:
        return OPERATIONS[action_type](engine, manifest)
    except (HomebinsError, OSError) as e:
        logger.warning("%s of %s failed: %s", action_type.value, manifest.name, e)
        return ActionResult(
            action_type=action_type,
            name=manifest.name,
            success=False,
            error=str(e),
        )


def execute_batch(
    engine: ManifestEngine,
    action_type: ActionType,
    manifests: Iterable[Manifest],
    on_result: Callable[[ActionResult], None] | None = None,
) -> list[ActionResult]:
    """Execute an operation on several manifests, in order.

    Each manifest is isolated: a failure is recorded in its result and the
    remaining manifests are still processed.

    Args:
        engine: Engine to execute with.
        action_type: Operation to execute.
        manifests: Manifests to operate on.
        on_result: Optional callback invoked with each result as it arrives.

    Returns:
        One ActionResult per manifest, in order.
    """
    results: list[ActionResult] = []
    for manifest in manifests:
        result = execute_action(engine, action_type, manifest)
        if on_result is not None:
            on_result(result)
        results.append(result)
    return results
