"""
Placeholder Substitution - Expand templates into candidate selectors.

Templates are semicolon-separated candidate lists (``\\;`` is a literal
semicolon) containing ``#{token}`` placeholders. Tokens may carry the
``loc.auto.`` prefix used by older pattern files.

Recognized tokens:
    fieldName, fieldName.lowercase (alias fieldName.toLowerCase), fieldInstance,
    fieldValue, forId, location.name, location.value, section.name, section.value

plus any configured extra variables. A token without a binding is a
ConfigurationError; it never silently becomes an empty string.
"""

from dataclasses import dataclass, field, replace
from typing import AbstractSet, Dict, List, Optional, Set
import logging
import re

from pattern_locator.engine.descriptor import FieldDescriptor
from pattern_locator.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


PLACEHOLDER_PATTERN = re.compile(r"#\{([^{}]+)\}")
_SEPARATOR = re.compile(r"(?<!\\);")
_LEGACY_PREFIX = "loc.auto."

RECOGNIZED_TOKENS = frozenset({
    "fieldName",
    "fieldName.lowercase",
    "fieldName.toLowerCase",
    "fieldInstance",
    "fieldValue",
    "forId",
    "location.name",
    "location.value",
    "section.name",
    "section.value",
})


def normalize_token(token: str) -> str:
    token = token.strip()
    if token.startswith(_LEGACY_PREFIX):
        token = token[len(_LEGACY_PREFIX):]
    return token


@dataclass(frozen=True)
class RuntimeVariableBindings:
    """
    Variable values for one resolution.

    None means "not bound". ``field_instance`` always has a value.
    """
    field_name: str
    field_instance: str = "1"
    field_value: Optional[str] = None
    for_id: Optional[str] = None
    location_name: Optional[str] = None
    location_value: Optional[str] = None
    section_name: Optional[str] = None
    section_value: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_descriptor(
        cls,
        descriptor: FieldDescriptor,
        field_value: Optional[str] = None,
        extra: Optional[Dict[str, str]] = None,
    ) -> "RuntimeVariableBindings":
        return cls(
            field_name=descriptor.field_name,
            field_instance=str(descriptor.instance),
            field_value=field_value,
            location_name=descriptor.location_name,
            location_value=descriptor.location_value,
            section_name=descriptor.section_name,
            section_value=descriptor.section_value,
            extra=dict(extra or {}),
        )

    def with_for_id(self, for_id: Optional[str]) -> "RuntimeVariableBindings":
        return replace(self, for_id=for_id or None)

    def as_dict(self) -> Dict[str, Optional[str]]:
        """All recognized tokens with their current values."""
        values: Dict[str, Optional[str]] = dict(self.extra)
        values.update({
            "fieldName": self.field_name,
            "fieldName.lowercase": self.field_name.lower(),
            "fieldName.toLowerCase": self.field_name.lower(),
            "fieldInstance": self.field_instance or "1",
            "fieldValue": self.field_value,
            "forId": self.for_id,
            "location.name": self.location_name,
            "location.value": self.location_value,
            "section.name": self.section_name,
            "section.value": self.section_value,
        })
        return values


class PlaceholderSubstitutionEngine:
    """
    Expand templates into ordered candidate lists.

    Example:
        >>> engine = PlaceholderSubstitutionEngine()
        >>> bindings = RuntimeVariableBindings(field_name="Submit")
        >>> engine.expand("//button[text()='#{fieldName}'];button#submit", bindings)
        ["//button[text()='Submit']", 'button#submit']
    """

    @staticmethod
    def split_candidates(template: str) -> List[str]:
        """Split a template on unescaped ';', trimming and dropping empty pieces."""
        pieces = (piece.replace("\\;", ";").strip() for piece in _SEPARATOR.split(template or ""))
        return [piece for piece in pieces if piece]

    @staticmethod
    def tokens_in(candidate: str) -> Set[str]:
        """Normalized placeholder tokens used by a candidate."""
        return {normalize_token(match) for match in PLACEHOLDER_PATTERN.findall(candidate)}

    def substitute(self, candidate: str, bindings: RuntimeVariableBindings) -> str:
        """
        Replace every placeholder in a single candidate.

        Raises:
            ConfigurationError: On unknown or unbound tokens
        """
        values = bindings.as_dict()

        def _replace(match: re.Match) -> str:
            token = normalize_token(match.group(1))
            if token not in RECOGNIZED_TOKENS and token not in bindings.extra:
                raise ConfigurationError(
                    f"Unknown placeholder '#{{{match.group(1)}}}' in template",
                    {"candidate": candidate, "token": token},
                )
            value = values.get(token)
            if value is None:
                raise ConfigurationError(
                    f"Placeholder '#{{{match.group(1)}}}' has no value in this context",
                    {"candidate": candidate, "token": token},
                )
            return value

        return PLACEHOLDER_PATTERN.sub(_replace, candidate)

    def expand(
        self,
        template: str,
        bindings: RuntimeVariableBindings,
        skip_unbound: AbstractSet[str] = frozenset(),
    ) -> List[str]:
        """
        Expand a template into concrete candidates, preserving order.

        Args:
            template: Semicolon-separated candidate templates
            bindings: Variable values for this resolution
            skip_unbound: Optional tokens; candidates using one of them while
                it is unbound are dropped instead of raising

        Returns:
            Concrete candidate selectors

        Raises:
            ConfigurationError: On unknown or unbound tokens
        """
        values = bindings.as_dict()
        expanded = []
        for candidate in self.split_candidates(template):
            optional_missing = {
                token for token in self.tokens_in(candidate)
                if token in skip_unbound and values.get(token) is None
            }
            if optional_missing:
                logger.debug(f"Skipping candidate without {sorted(optional_missing)}: {candidate}")
                continue
            expanded.append(self.substitute(candidate, bindings))
        return expanded
