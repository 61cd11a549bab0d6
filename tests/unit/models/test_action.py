"""Unit tests for action and status models."""

from pathlib import Path

import pytest
from homebins.models.action import ActionResult, ActionType, ManifestStatus, ToolStatus


class TestManifestStatus:
    """Tests for ManifestStatus dataclass."""

    @pytest.mark.parametrize(
        ("status", "installed", "outdated"),
        [
            (ToolStatus.NOT_INSTALLED, False, False),
            (ToolStatus.UP_TO_DATE, True, False),
            (ToolStatus.OUTDATED, True, True),
        ],
    )
    def test_properties(self, status: ToolStatus, installed: bool, outdated: bool) -> None:
        """is_installed and is_outdated follow the status."""
        manifest_status = ManifestStatus(name="jq", manifest_version="1.6", status=status)
        assert manifest_status.is_installed is installed
        assert manifest_status.is_outdated is outdated

    def test_immutable(self) -> None:
        """Statuses cannot be modified."""
        status = ManifestStatus(name="jq", manifest_version="1.6", status=ToolStatus.UP_TO_DATE)
        with pytest.raises(AttributeError):
            status.name = "yq"  # type: ignore[misc]


class TestActionResult:
    """Tests for ActionResult dataclass."""

    def test_success(self) -> None:
        """Successful results are not failed."""
        result = ActionResult(
            action_type=ActionType.INSTALL,
            name="jq",
            success=True,
            changed=True,
            paths=(Path("/home/u/.local/bin/jq"),),
        )
        assert not result.failed
        assert result.error is None

    def test_failure(self) -> None:
        """Failed results carry an error."""
        result = ActionResult(
            action_type=ActionType.REMOVE, name="jq", success=False, error="denied"
        )
        assert result.failed
        assert result.paths == ()
        assert not result.changed
