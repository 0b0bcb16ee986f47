"""
Candidate Chain Builder - Compose location >> section >> field candidates.

Steps:
1. Expand the field template for the element type (sub-type falls back to base)
2. Label indirection for label-eligible types: find the label for the field,
   read its ``for`` attribute and put ``forId`` candidates first
3. Wrap field candidates in section containers
4. Wrap those in location containers
5. Qualify the innermost field candidate with the instance number

``>>`` means "search only inside the previous match"; the probe evaluates it.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING
import logging

from pattern_locator.engine.descriptor import FieldDescriptor
from pattern_locator.engine.executor import ResolutionExecutor
from pattern_locator.engine.substitution import (
    PlaceholderSubstitutionEngine,
    RuntimeVariableBindings,
)
from pattern_locator.exceptions import ConfigurationError
from pattern_locator.patterns.models import PatternSet
from pattern_locator.patterns.registry import PatternSetRegistry

if TYPE_CHECKING:
    from pattern_locator.interfaces.probe import IElementProbe

logger = logging.getLogger(__name__)


CHAIN_SEPARATOR = " >> "
LABEL_TYPE = "label"
FOR_ID_TOKEN = "forId"


def is_xpath(selector: str) -> bool:
    selector = selector.strip()
    return selector.startswith("//") or selector.startswith("(")


def apply_instance(candidate: str, instance: int, in_container: bool) -> str:
    """
    Select the Nth match of a field candidate (1-based).

    A bare XPath outside any container becomes ``(xpath)[N]``; anything else
    gets a ``>> nth=N-1`` suffix.
    """
    if instance <= 1:
        return candidate
    if not in_container and is_xpath(candidate) and not candidate.startswith("("):
        return f"({candidate})[{instance}]"
    return f"{candidate}{CHAIN_SEPARATOR}nth={instance - 1}"


@dataclass
class ResolvedLocator:
    """
    Composed, ordered candidates for one field, before probing.

    Attributes:
        candidates: Fully composed candidates, highest priority first
        description: Human-readable summary for logs and errors
        base_candidates: Same candidates without the instance qualifier
        chain_prefixes: Container chains (location >> section), if any
        instance: 1-based instance applied to the field candidates
        for_id: ``for`` value found through label indirection
        label_pending: Label indirection applies but found no label yet
        scroll_candidates: Scrollable containers from the pattern set
    """
    candidates: List[str]
    description: str
    base_candidates: List[str] = field(default_factory=list)
    chain_prefixes: List[str] = field(default_factory=list)
    instance: int = 1
    for_id: Optional[str] = None
    label_pending: bool = False
    scroll_candidates: Optional[List[str]] = None

    @property
    def chain_prefix(self) -> Optional[str]:
        return self.chain_prefixes[0] if self.chain_prefixes else None


class CandidateChainBuilder:
    """
    Build ResolvedLocator objects from a pattern set and a field descriptor.

    Example:
        >>> builder = CandidateChainBuilder(registry)
        >>> locator = await builder.build(pattern_set, parse_field("{Login Form} Username"), "input")
        >>> locator.candidates
        ["#login >> //input[@name='username']"]
    """

    def __init__(
        self,
        registry: PatternSetRegistry,
        substitution: Optional[PlaceholderSubstitutionEngine] = None,
        executor: Optional[ResolutionExecutor] = None,
        variables: Optional[Dict[str, str]] = None,
    ):
        self.registry = registry
        self.substitution = substitution or PlaceholderSubstitutionEngine()
        self.executor = executor or ResolutionExecutor()
        self.variables = dict(variables or {})

    async def build(
        self,
        pattern_set: PatternSet,
        descriptor: FieldDescriptor,
        element_type: str,
        *,
        probe: Optional["IElementProbe"] = None,
        field_value: Optional[str] = None,
    ) -> ResolvedLocator:
        """
        Compose the candidate list for a field.

        Args:
            pattern_set: Active pattern set
            descriptor: Parsed field descriptor
            element_type: Element type key, optionally with a dot sub-type
            probe: Probe used for label indirection (skipped when None)
            field_value: Value bound to ``#{fieldValue}``

        Returns:
            ResolvedLocator with ordered candidates

        Raises:
            ConfigurationError: Missing templates or unbound placeholders
        """
        template = pattern_set.field_template(element_type)
        if template is None:
            base_type = element_type.partition(".")[0]
            raise ConfigurationError(
                f"No field template for type '{element_type}' in pattern set '{pattern_set.id}'",
                {
                    "pattern_set_id": pattern_set.id,
                    "keys_tried": sorted({element_type, base_type}),
                },
            )

        bindings = RuntimeVariableBindings.from_descriptor(descriptor, field_value, self.variables)
        prefixes = self._container_chains(pattern_set, descriptor, bindings)
        in_container = bool(prefixes)

        label_pending = False
        label_eligible = (
            LABEL_TYPE in pattern_set.fields
            and self.registry.is_label_eligible(element_type, pattern_set)
        )
        if label_eligible and probe is not None:
            for_id = await self._find_label_for_id(pattern_set, descriptor, bindings, prefixes, probe)
            if for_id:
                bindings = bindings.with_for_id(for_id)
            else:
                label_pending = True

        field_pairs = self._field_candidates(template, bindings, descriptor.instance, in_container)
        base_candidates = self._compose(prefixes, [base for base, _ in field_pairs])
        candidates = self._compose(prefixes, [final for _, final in field_pairs])

        unique: Dict[str, str] = {}
        for final, base in zip(candidates, base_candidates):
            unique.setdefault(final, base)

        scroll_candidates = None
        if pattern_set.scroll:
            scroll_candidates = self.substitution.expand(pattern_set.scroll, bindings)

        locator = ResolvedLocator(
            candidates=list(unique),
            base_candidates=list(unique.values()),
            description=f"{pattern_set.id}.{element_type}: {descriptor.normalized()}",
            chain_prefixes=prefixes,
            instance=descriptor.instance,
            for_id=bindings.for_id,
            label_pending=label_pending,
            scroll_candidates=scroll_candidates,
        )
        logger.debug(f"Built {len(locator.candidates)} candidate(s) for {locator.description}")
        return locator

    # ==================== Internals ====================

    def _field_candidates(
        self,
        template: str,
        bindings: RuntimeVariableBindings,
        instance: int,
        in_container: bool,
    ) -> List[tuple]:
        """
        Expand the field template into (base, qualified) pairs.

        ``forId`` candidates come first when a label was found and are left
        unqualified: the instance already picked the label. Without a bound
        ``forId`` they are skipped.
        """
        raw = self.substitution.split_candidates(template)
        with_for = [c for c in raw if FOR_ID_TOKEN in self.substitution.tokens_in(c)]
        without_for = [c for c in raw if FOR_ID_TOKEN not in self.substitution.tokens_in(c)]

        pairs = []
        if bindings.for_id:
            for candidate in with_for:
                concrete = self.substitution.substitute(candidate, bindings)
                pairs.append((concrete, concrete))
        for candidate in without_for:
            concrete = self.substitution.substitute(candidate, bindings)
            pairs.append((concrete, apply_instance(concrete, instance, in_container)))
        return pairs

    def _container_chains(
        self,
        pattern_set: PatternSet,
        descriptor: FieldDescriptor,
        bindings: RuntimeVariableBindings,
    ) -> List[str]:
        locations = self._containers(pattern_set.locations, descriptor.location_name, "location", pattern_set, bindings)
        sections = self._containers(pattern_set.sections, descriptor.section_name, "section", pattern_set, bindings)

        if locations and sections:
            return [f"{loc}{CHAIN_SEPARATOR}{sec}" for loc in locations for sec in sections]
        return locations or sections

    def _containers(
        self,
        templates: Dict[str, str],
        name: Optional[str],
        kind: str,
        pattern_set: PatternSet,
        bindings: RuntimeVariableBindings,
    ) -> List[str]:
        if name is None:
            return []
        if name not in templates:
            raise ConfigurationError(
                f"Unknown {kind} '{name}' in pattern set '{pattern_set.id}'",
                {"pattern_set_id": pattern_set.id, kind: name, "available": sorted(templates)},
            )
        containers = self.substitution.expand(templates[name], bindings)
        if not containers:
            raise ConfigurationError(
                f"Empty {kind} template '{name}' in pattern set '{pattern_set.id}'",
                {"pattern_set_id": pattern_set.id, kind: name},
            )
        return containers

    @staticmethod
    def _compose(prefixes: List[str], fields: List[str]) -> List[str]:
        if not prefixes:
            return list(fields)
        return [f"{prefix}{CHAIN_SEPARATOR}{candidate}" for prefix in prefixes for candidate in fields]

    async def _find_label_for_id(
        self,
        pattern_set: PatternSet,
        descriptor: FieldDescriptor,
        bindings: RuntimeVariableBindings,
        prefixes: List[str],
        probe: "IElementProbe",
    ) -> Optional[str]:
        labels = self.substitution.expand(
            pattern_set.fields[LABEL_TYPE], bindings, skip_unbound={FOR_ID_TOKEN}
        )
        labels = [apply_instance(label, descriptor.instance, bool(prefixes)) for label in labels]
        label = await self.executor.first_existing(self._compose(prefixes, labels), probe)
        if label is None:
            logger.debug(f"No label found for '{descriptor.field_name}'; continuing without forId")
            return None

        try:
            for_id = await probe.get_attribute(label, "for")
        except Exception as e:
            logger.debug(f"Could not read 'for' from label {label}: {e}")
            return None
        if for_id and for_id.strip():
            logger.debug(f"✓ Label found with for=\"{for_id}\": {label}")
            return for_id.strip()
        logger.debug(f"Label has no 'for' attribute: {label}")
        return None
