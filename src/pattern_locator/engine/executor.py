"""
Resolution Executor - Probe candidates in priority order.

Candidates are probed strictly sequentially: order encodes priority, and
concurrent DOM probes against one page are not assumed independent.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING
import logging
import warnings

from pattern_locator.exceptions import AmbiguousMatchWarning

if TYPE_CHECKING:
    from pattern_locator.interfaces.probe import IElementProbe

logger = logging.getLogger(__name__)


@dataclass
class ProbeResult:
    """Outcome of one probing pass."""
    candidates: List[str]
    matched: Optional[str] = None
    existing_invisible: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    probed: int = 0

    @property
    def is_resolved(self) -> bool:
        return self.matched is not None


class ResolutionExecutor:
    """
    Select the first candidate that exists and is visible.

    Example:
        >>> executor = ResolutionExecutor()
        >>> result = await executor.probe_once(["#a", "#b"], probe)
        >>> result.matched
        '#b'
    """

    async def probe_once(
        self,
        candidates: List[str],
        probe: "IElementProbe",
        *,
        require_visible: bool = True,
        base_candidates: Optional[List[str]] = None,
    ) -> ProbeResult:
        """
        Run one pass over the candidates.

        A candidate that exists but is not visible is recorded and skipped;
        candidates after the winner are never probed.

        Args:
            candidates: Ordered candidate selectors
            probe: Element probe for the live page
            require_visible: False accepts the first existing candidate
            base_candidates: Same candidates without instance qualifier,
                used to detect ambiguous matches

        Returns:
            ProbeResult; ``is_resolved`` is False when nothing matched
        """
        result = ProbeResult(candidates=list(candidates))

        for index, candidate in enumerate(candidates):
            result.probed += 1
            try:
                if not await probe.exists(candidate):
                    logger.debug(f"✗ Candidate {index + 1}/{len(candidates)} not found: {candidate}")
                    continue
                if require_visible and not await probe.visible(candidate):
                    logger.debug(f"✗ Candidate {index + 1}/{len(candidates)} exists but is hidden: {candidate}")
                    result.existing_invisible.append(candidate)
                    continue
            except Exception as e:
                logger.warning(f"✗ Probe failed for candidate {candidate}: {e}")
                result.errors[candidate] = str(e)
                continue

            logger.debug(f"✓ Candidate {index + 1}/{len(candidates)} matched: {candidate}")
            result.matched = candidate
            base = base_candidates[index] if base_candidates and index < len(base_candidates) else candidate
            await self._check_ambiguity(probe, candidate, base)
            return result

        return result

    async def first_existing(self, candidates: List[str], probe: "IElementProbe") -> Optional[str]:
        """Return the first candidate that exists, ignoring visibility."""
        for candidate in candidates:
            try:
                if await probe.exists(candidate):
                    return candidate
            except Exception as e:
                logger.warning(f"✗ Probe failed for candidate {candidate}: {e}")
        return None

    async def _check_ambiguity(self, probe: "IElementProbe", matched: str, base: str) -> None:
        try:
            count = await probe.count(base)
        except Exception as e:
            logger.debug(f"Could not count matches for {base}: {e}")
            return
        if count > 1:
            message = (
                f"{count} elements match '{base}'; using "
                f"{'the first' if base == matched else repr(matched)}"
            )
            logger.warning(f"Ambiguous match: {message}")
            warnings.warn(message, AmbiguousMatchWarning, stacklevel=3)
