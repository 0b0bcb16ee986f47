"""
Tests for ResolutionExecutor - sequential candidate probing.
"""

import warnings

import pytest
from unittest.mock import AsyncMock

from pattern_locator.engine.executor import ResolutionExecutor
from pattern_locator.exceptions import AmbiguousMatchWarning


@pytest.fixture
def executor():
    return ResolutionExecutor()


class TestProbeOnce:
    """Test a single probing pass."""

    @pytest.mark.asyncio
    async def test_first_visible_wins(self, executor, fake_probe):
        """Test that probing stops at the first visible candidate."""
        probe = fake_probe(visible=["p2", "p3"])

        result = await executor.probe_once(["p1", "p2", "p3"], probe)

        assert result.matched == "p2"
        assert result.is_resolved
        assert result.probed == 2
        assert "p3" not in probe.probed("exists")
        assert "p3" not in probe.probed("visible")

    @pytest.mark.asyncio
    async def test_hidden_candidates_recorded(self, executor, fake_probe):
        """Test that existing but hidden candidates are skipped and recorded."""
        probe = fake_probe(visible=["p3"], hidden=["p1"])

        result = await executor.probe_once(["p1", "p2", "p3"], probe)

        assert result.matched == "p3"
        assert result.existing_invisible == ["p1"]

    @pytest.mark.asyncio
    async def test_nothing_matches(self, executor, fake_probe):
        """Test an unresolved pass."""
        probe = fake_probe(hidden=["p2"])

        result = await executor.probe_once(["p1", "p2"], probe)

        assert result.matched is None
        assert not result.is_resolved
        assert result.probed == 2
        assert result.existing_invisible == ["p2"]

    @pytest.mark.asyncio
    async def test_exists_only_mode(self, executor, fake_probe):
        """Test that require_visible=False accepts a hidden element."""
        probe = fake_probe(hidden=["p1"])

        result = await executor.probe_once(["p1"], probe, require_visible=False)

        assert result.matched == "p1"
        assert probe.probed("visible") == []

    @pytest.mark.asyncio
    async def test_probe_error_moves_on(self, executor):
        """Test that a failing probe call is recorded and the next candidate tried."""
        probe = AsyncMock()
        probe.exists.side_effect = [RuntimeError("detached"), True]
        probe.visible.return_value = True
        probe.count.return_value = 1

        result = await executor.probe_once(["bad", "good"], probe)

        assert result.matched == "good"
        assert result.errors == {"bad": "detached"}

    @pytest.mark.asyncio
    async def test_empty_candidates(self, executor, fake_probe):
        """Test that no candidates give an unresolved result."""
        result = await executor.probe_once([], fake_probe())
        assert not result.is_resolved


class TestAmbiguity:
    """Test ambiguous match reporting."""

    @pytest.mark.asyncio
    async def test_warns_on_multiple_matches(self, executor, fake_probe):
        """Test that several live matches issue AmbiguousMatchWarning."""
        probe = fake_probe(visible=["button.go"], counts={"button.go": 3})

        with pytest.warns(AmbiguousMatchWarning, match="3 elements match"):
            result = await executor.probe_once(["button.go"], probe)

        assert result.matched == "button.go"

    @pytest.mark.asyncio
    async def test_counts_base_candidate(self, executor, fake_probe):
        """Test that the count uses the candidate without instance qualifier."""
        probe = fake_probe(visible=["button.go >> nth=1"], counts={"button.go": 2})

        with pytest.warns(AmbiguousMatchWarning):
            await executor.probe_once(
                ["button.go >> nth=1"], probe, base_candidates=["button.go"]
            )

        assert probe.probed("count") == ["button.go"]

    @pytest.mark.asyncio
    async def test_single_match_is_silent(self, executor, fake_probe):
        """Test that a unique match does not warn."""
        probe = fake_probe(visible=["#go"])

        with warnings.catch_warnings():
            warnings.simplefilter("error", AmbiguousMatchWarning)
            await executor.probe_once(["#go"], probe)


class TestFirstExisting:
    """Test the existence-only helper."""

    @pytest.mark.asyncio
    async def test_first_existing(self, executor, fake_probe):
        """Test that visibility is ignored."""
        probe = fake_probe(hidden=["b"], visible=["c"])

        assert await executor.first_existing(["a", "b", "c"], probe) == "b"
        assert await executor.first_existing(["a"], probe) is None
