"""
Retry Scroll Controller - Timeout-bounded probing with scroll between passes.

    Probing -> Resolved
            -> NotResolved -> (time left)  scroll, wait, Probing
                           -> (time spent) ElementNotFoundError

Time is measured with a monotonic clock. The wait before the last pass is
shortened to the remaining budget, so the loop never overshoots the timeout
by more than one interval.
"""

from typing import Awaitable, Callable, Dict, List, Optional, TYPE_CHECKING
import asyncio
import logging
import time

from pattern_locator.engine.chain_builder import CHAIN_SEPARATOR, ResolvedLocator
from pattern_locator.engine.executor import ProbeResult, ResolutionExecutor
from pattern_locator.exceptions import ElementNotFoundError

if TYPE_CHECKING:
    from pattern_locator.interfaces.probe import IElementProbe

logger = logging.getLogger(__name__)


def container_of(candidate: str) -> str:
    """
    The container part of a chained candidate, or the candidate itself.

    A trailing ``nth=`` qualifier belongs to the field, not the container.
    """
    parts = [part.strip() for part in candidate.split(CHAIN_SEPARATOR.strip())]
    if len(parts) > 1 and parts[-1].startswith("nth="):
        parts = parts[:-1]
    if len(parts) > 1:
        parts = parts[:-1]
    return CHAIN_SEPARATOR.join(parts)


class RetryScrollController:
    """
    Resolve candidates against a probe until a match or the timeout.

    Example:
        >>> controller = RetryScrollController()
        >>> selector = await controller.resolve(
        ...     ["#submit", "button.primary"], probe,
        ...     retry_timeout_ms=5000, retry_interval_ms=500,
        ... )
    """

    def __init__(self, executor: Optional[ResolutionExecutor] = None):
        self.executor = executor or ResolutionExecutor()

    async def resolve(
        self,
        candidates: List[str],
        probe: "IElementProbe",
        scroll_candidates: Optional[List[str]] = None,
        retry_timeout_ms: int = 30000,
        retry_interval_ms: int = 2000,
        *,
        require_visible: bool = True,
        base_candidates: Optional[List[str]] = None,
        descriptor: Optional[str] = None,
        pattern_set_id: Optional[str] = None,
        refresh: Optional[Callable[[], Awaitable[ResolvedLocator]]] = None,
    ) -> str:
        """
        Probe until a candidate matches.

        Args:
            candidates: Ordered candidate selectors
            probe: Element probe for the live page
            scroll_candidates: Scrollable containers to scroll on a miss
            retry_timeout_ms: Total time budget
            retry_interval_ms: Wait between passes
            require_visible: False accepts existing-but-hidden elements
            base_candidates: Candidates without instance qualifier
            descriptor: Field descriptor, for diagnostics
            pattern_set_id: Pattern set id, for diagnostics
            refresh: Rebuilds the candidates before each retry pass
                (used while label indirection has not found a label)

        Returns:
            The winning selector

        Raises:
            ElementNotFoundError: When the budget is spent, or the wait is cancelled
        """
        start = time.monotonic()
        attempts = 0
        tried: Dict[str, None] = {}
        invisible: Dict[str, None] = {}

        def elapsed_ms() -> float:
            return (time.monotonic() - start) * 1000

        def not_found(message: str, cancelled: bool = False) -> ElementNotFoundError:
            return ElementNotFoundError(
                message,
                candidates=list(tried),
                existing_invisible=list(invisible),
                elapsed_ms=elapsed_ms(),
                descriptor=descriptor,
                pattern_set_id=pattern_set_id,
                attempts=attempts,
                cancelled=cancelled,
            )

        try:
            while True:
                attempts += 1
                logger.debug(f"Attempt #{attempts} - probing {len(candidates)} candidate(s)")
                result = await self.executor.probe_once(
                    candidates,
                    probe,
                    require_visible=require_visible,
                    base_candidates=base_candidates,
                )
                tried.update(dict.fromkeys(candidates[:result.probed]))
                invisible.update(dict.fromkeys(result.existing_invisible))

                if result.is_resolved:
                    logger.info(
                        f"✓ Resolved {descriptor or 'field'} -> {result.matched} "
                        f"(attempt {attempts}, {elapsed_ms():.0f}ms)"
                    )
                    return result.matched

                if elapsed_ms() >= retry_timeout_ms:
                    break

                await self._scroll(probe, result, scroll_candidates)

                remaining_ms = retry_timeout_ms - elapsed_ms()
                wait_ms = max(0.0, min(retry_interval_ms, remaining_ms))
                logger.debug(f"⏳ Not found. Retrying in {wait_ms:.0f}ms...")
                await asyncio.sleep(wait_ms / 1000)

                if refresh is not None:
                    locator = await refresh()
                    candidates = locator.candidates
                    base_candidates = locator.base_candidates
                    if not locator.label_pending:
                        refresh = None
        except asyncio.CancelledError as e:
            logger.warning(f"✗ Resolution of {descriptor or 'field'} cancelled after {elapsed_ms():.0f}ms")
            raise not_found(
                f"Resolution cancelled before a match for {descriptor or 'field'} "
                f"in pattern set '{pattern_set_id}'",
                cancelled=True,
            ) from e

        logger.warning(
            f"✗ All {attempts} attempt(s) exhausted for {descriptor or 'field'} "
            f"in pattern set '{pattern_set_id}' ({elapsed_ms():.0f}ms)"
        )
        kind = "visible element" if require_visible else "element"
        raise not_found(
            f"No {kind} found for {descriptor or 'field'} in pattern set "
            f"'{pattern_set_id}' after {attempts} attempt(s)"
        )

    async def _scroll(
        self,
        probe: "IElementProbe",
        result: ProbeResult,
        scroll_candidates: Optional[List[str]],
    ) -> None:
        """Scroll the first hidden candidate's container, else the scroll containers."""
        targets: List[str] = []
        if result.existing_invisible:
            targets = [container_of(result.existing_invisible[0])]
        elif scroll_candidates:
            targets = [c for c in scroll_candidates if await self._exists(probe, c)]

        for target in targets:
            try:
                logger.debug(f"Scrolling into view: {target}")
                await probe.scroll_into_view(target)
            except Exception as e:
                logger.debug(f"Scroll failed for {target}: {e}")

    @staticmethod
    async def _exists(probe: "IElementProbe", selector: str) -> bool:
        try:
            return await probe.exists(selector)
        except Exception as e:
            logger.debug(f"Probe failed for scroll container {selector}: {e}")
            return False
