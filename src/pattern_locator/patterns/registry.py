"""
Pattern Set Registry - Named pattern sets and the element-type table.

Each worker owns its own registry (use ``snapshot()`` to hand one out),
so nothing mutable is shared between parallel scenarios.

Element types are described by an explicit table of ElementTypeSpec entries;
adding a type is a registry entry, not a new method.

Example:
    >>> registry = PatternSetRegistry()
    >>> registry.register(PatternSet(id="loginPage", fields={"button": "button"}))
    >>> registry.get_field_template("loginPage", "button")
    'button'
"""

from typing import Dict, Iterable, List
import logging

from pattern_locator.exceptions import ConfigurationError
from pattern_locator.patterns.models import ElementTypeSpec, PatternSet

logger = logging.getLogger(__name__)


DEFAULT_LABEL_ELIGIBLE = ("input", "select", "textarea")


class PatternSetRegistry:
    """
    Store of pattern sets keyed by id, plus element-type descriptors.
    """

    def __init__(self, label_eligible: Iterable[str] = DEFAULT_LABEL_ELIGIBLE):
        self._pattern_sets: Dict[str, PatternSet] = {}
        self._element_types: Dict[str, ElementTypeSpec] = {}
        for name in label_eligible:
            self.register_element_type(ElementTypeSpec(name=name, label_eligible=True))

    # ==================== Pattern Sets ====================

    def register(self, pattern_set: PatternSet, replace: bool = False) -> PatternSet:
        """
        Register a pattern set.

        Args:
            pattern_set: The pattern set to add
            replace: Allow overwriting an existing id

        Raises:
            ConfigurationError: If the id is already registered
        """
        if pattern_set.id in self._pattern_sets and not replace:
            raise ConfigurationError(
                f"Pattern set '{pattern_set.id}' is already registered",
                {"pattern_set_id": pattern_set.id},
            )
        self._pattern_sets[pattern_set.id] = pattern_set
        logger.debug(
            f"Registered pattern set '{pattern_set.id}' "
            f"({len(pattern_set.fields)} field types, {len(pattern_set.sections)} sections, "
            f"{len(pattern_set.locations)} locations)"
        )
        return pattern_set

    def register_many(self, pattern_sets: Iterable[PatternSet], replace: bool = False) -> None:
        for pattern_set in pattern_sets:
            self.register(pattern_set, replace=replace)

    def contains(self, pattern_set_id: str) -> bool:
        return pattern_set_id in self._pattern_sets

    __contains__ = contains

    def get(self, pattern_set_id: str) -> PatternSet:
        """
        Get a registered pattern set by id.

        Raises:
            ConfigurationError: If the id is not registered
        """
        try:
            return self._pattern_sets[pattern_set_id]
        except KeyError:
            raise ConfigurationError(
                f"Unknown pattern set: '{pattern_set_id}'. "
                f"Available pattern sets: {self.list_pattern_sets()}",
                {"pattern_set_id": pattern_set_id},
            ) from None

    def get_field_template(self, pattern_set_id: str, element_type: str) -> str:
        """
        Get the field template for an element type.

        The exact key is tried first (including a dotted sub-type such as
        ``"checkbox.fieldSet"``), then the base type.

        Raises:
            ConfigurationError: If neither key is defined
        """
        pattern_set = self.get(pattern_set_id)
        template = pattern_set.field_template(element_type)
        if template is None:
            base_type = element_type.partition(".")[0]
            tried = [element_type] if base_type == element_type else [element_type, base_type]
            raise ConfigurationError(
                f"No field template for type '{element_type}' in pattern set '{pattern_set_id}'",
                {"pattern_set_id": pattern_set_id, "keys_tried": tried},
            )
        return template

    def list_pattern_sets(self) -> List[str]:
        """List all registered pattern set ids."""
        return sorted(self._pattern_sets)

    # ==================== Element Types ====================

    def register_element_type(self, spec: ElementTypeSpec) -> None:
        self._element_types[spec.name] = spec

    def get_element_type(self, element_type: str) -> ElementTypeSpec:
        """Get the descriptor for an element type; unknown types get a plain entry."""
        base_type = element_type.partition(".")[0]
        return self._element_types.get(base_type, ElementTypeSpec(name=base_type))

    def is_label_eligible(self, element_type: str, pattern_set: PatternSet | None = None) -> bool:
        """
        Check whether an element type is resolved through label indirection.

        A pattern set may mark additional types as label-eligible.
        """
        base_type = element_type.partition(".")[0]
        if self.get_element_type(base_type).label_eligible:
            return True
        if pattern_set is not None:
            return element_type in pattern_set.label_eligible or base_type in pattern_set.label_eligible
        return False

    def list_element_types(self) -> List[str]:
        return sorted(self._element_types)

    # ==================== Lifecycle ====================

    def snapshot(self) -> "PatternSetRegistry":
        """
        Create an independent copy for a worker.

        Pattern sets are deep-copied: their template dicts stay mutable
        even though the models are frozen.
        """
        copy = PatternSetRegistry(label_eligible=())
        copy._pattern_sets = {
            pattern_set_id: pattern_set.model_copy(deep=True)
            for pattern_set_id, pattern_set in self._pattern_sets.items()
        }
        copy._element_types = dict(self._element_types)
        return copy

    def clear_all(self) -> None:
        """Remove every pattern set (element types are kept)."""
        self._pattern_sets.clear()

    def __len__(self) -> int:
        return len(self._pattern_sets)
