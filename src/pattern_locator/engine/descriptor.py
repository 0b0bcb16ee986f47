"""
Field Descriptor Parser - Parse test-author field strings.

Grammar:
    [ "{{" location [ "::" value ] "}}" ] [ "{" section [ "::" value ] "}" ] field [ "[" N "]" ]

Examples:
    "Username"                          -> field "Username", instance 1
    "{Login Form} Submit"               -> section "Login Form", field "Submit"
    "{{Header:: main}} {Nav} Home[2]"   -> location, section, field, instance 2

Whitespace between parts is insignificant. Order is fixed: location, then
section, then field. A field name may contain literal brackets escaped with a
slash: ``/{``, ``/}``, ``/[``, ``/]`` (``/{{`` escapes both braces).
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging

from pattern_locator.exceptions import ParseError

logger = logging.getLogger(__name__)


_ESCAPABLE = "{}[]"

# (character, escaped)
_Token = Tuple[str, bool]


@dataclass(frozen=True)
class FieldDescriptor:
    """Parsed shape of a field string."""
    field_name: str
    instance: int = 1
    location_name: Optional[str] = None
    location_value: Optional[str] = None
    section_name: Optional[str] = None
    section_value: Optional[str] = None

    def __post_init__(self):
        if not self.field_name or not self.field_name.strip():
            raise ValueError("field_name must not be empty")
        if self.instance < 1:
            raise ValueError("instance must be >= 1")

    @property
    def has_location(self) -> bool:
        return self.location_name is not None

    @property
    def has_section(self) -> bool:
        return self.section_name is not None

    def normalized(self) -> str:
        """Canonical string form; equal descriptors give equal strings."""
        parts = []
        if self.location_name is not None:
            parts.append("{{" + _group(self.location_name, self.location_value) + "}}")
        if self.section_name is not None:
            parts.append("{" + _group(self.section_name, self.section_value) + "}")
        name = "".join("/" + ch if ch in _ESCAPABLE else ch for ch in self.field_name)
        parts.append(f"{name}[{self.instance}]")
        return " ".join(parts)

    def __str__(self) -> str:
        return self.normalized()


def _group(name: str, value: Optional[str]) -> str:
    return f"{name}:: {value}" if value is not None else name


class FieldDescriptorParser:
    """
    Parser for the field descriptor grammar.

    Malformed input (unmatched braces, reversed location/section order,
    stray brackets, bad instance numbers) raises ParseError; nothing is
    silently ignored.
    """

    def parse(self, raw: str) -> FieldDescriptor:
        """
        Parse a field string.

        Args:
            raw: Field string as written by the test author

        Returns:
            FieldDescriptor

        Raises:
            ParseError: On malformed syntax
        """
        if raw is None or not raw.strip():
            raise ParseError("Field descriptor is empty", raw=raw or "")

        tokens = self._tokenize(raw)
        pos = self._skip_ws(tokens, 0)

        location: Optional[Tuple[str, Optional[str]]] = None
        section: Optional[Tuple[str, Optional[str]]] = None

        if self._is_open(tokens, pos) and self._is_open(tokens, pos + 1):
            location, pos = self._read_group(raw, tokens, pos + 2, double=True)
            pos = self._skip_ws(tokens, pos)

        if self._is_open(tokens, pos):
            if self._is_open(tokens, pos + 1):
                raise ParseError("Only one location '{{...}}' is allowed", raw=raw, position=pos)
            section, pos = self._read_group(raw, tokens, pos + 1, double=False)
            pos = self._skip_ws(tokens, pos)
            if self._is_open(tokens, pos):
                if self._is_open(tokens, pos + 1):
                    raise ParseError(
                        "Location '{{...}}' must come before section '{...}'",
                        raw=raw,
                        position=pos,
                    )
                raise ParseError("Only one section '{...}' is allowed", raw=raw, position=pos)

        field_tokens = tokens[pos:]
        field_tokens, instance = self._read_instance(raw, field_tokens, pos)

        for offset, (ch, escaped) in enumerate(field_tokens):
            if ch in _ESCAPABLE and not escaped:
                raise ParseError(
                    f"Unexpected '{ch}' in field name (escape it as '/{ch}')",
                    raw=raw,
                    position=pos + offset,
                )

        field_name = "".join(ch for ch, _ in field_tokens).strip()
        if not field_name:
            raise ParseError("Field name is missing", raw=raw, position=pos)

        descriptor = FieldDescriptor(
            field_name=field_name,
            instance=instance,
            location_name=location[0] if location else None,
            location_value=location[1] if location else None,
            section_name=section[0] if section else None,
            section_value=section[1] if section else None,
        )
        logger.debug(f"Parsed field '{raw}' -> {descriptor.normalized()}")
        return descriptor

    # ==================== Internals ====================

    @staticmethod
    def _tokenize(raw: str) -> List[_Token]:
        tokens: List[_Token] = []
        i = 0
        while i < len(raw):
            if raw.startswith("/{{", i):
                tokens.extend([("{", True), ("{", True)])
                i += 3
            elif raw[i] == "/" and i + 1 < len(raw) and raw[i + 1] in _ESCAPABLE:
                tokens.append((raw[i + 1], True))
                i += 2
            else:
                tokens.append((raw[i], False))
                i += 1
        return tokens

    @staticmethod
    def _skip_ws(tokens: List[_Token], pos: int) -> int:
        while pos < len(tokens) and tokens[pos][0].isspace():
            pos += 1
        return pos

    @staticmethod
    def _is_open(tokens: List[_Token], pos: int) -> bool:
        return pos < len(tokens) and tokens[pos] == ("{", False)

    @staticmethod
    def _is_close(tokens: List[_Token], pos: int) -> bool:
        return pos < len(tokens) and tokens[pos] == ("}", False)

    def _read_group(
        self,
        raw: str,
        tokens: List[_Token],
        start: int,
        double: bool,
    ) -> Tuple[Tuple[str, Optional[str]], int]:
        kind = "location" if double else "section"
        pos = start
        while pos < len(tokens):
            if self._is_open(tokens, pos):
                raise ParseError(f"Nested '{{' inside {kind}", raw=raw, position=pos)
            if self._is_close(tokens, pos):
                break
            pos += 1
        else:
            raise ParseError(f"Unmatched '{{' opening {kind}", raw=raw, position=start - 1)

        end = pos + 1
        if double:
            if not self._is_close(tokens, end):
                raise ParseError("Location opened with '{{' must close with '}}'", raw=raw, position=pos)
            end += 1

        content = "".join(ch for ch, _ in tokens[start:pos])
        name, sep, value = content.partition("::")
        name = name.strip()
        if not name:
            raise ParseError(f"Empty {kind} name", raw=raw, position=start)
        if sep:
            value = value.strip()
            if not value:
                raise ParseError(f"Empty {kind} value after '::'", raw=raw, position=start)
            return (name, value), end
        return (name, None), end

    @staticmethod
    def _read_instance(raw: str, tokens: List[_Token], base: int) -> Tuple[List[_Token], int]:
        end = len(tokens)
        while end > 0 and tokens[end - 1][0].isspace():
            end -= 1
        if end == 0 or tokens[end - 1] != ("]", False):
            return tokens[:end], 1

        open_pos = end - 2
        while open_pos >= 0 and tokens[open_pos] != ("[", False):
            open_pos -= 1
        if open_pos < 0:
            raise ParseError("Unmatched ']' in field", raw=raw, position=base + end - 1)

        content = "".join(ch for ch, _ in tokens[open_pos + 1:end - 1]).strip()
        if not (content.isascii() and content.isdigit()) or int(content) < 1:
            raise ParseError(
                f"Instance must be a positive integer, got '[{content}]'",
                raw=raw,
                position=base + open_pos,
            )
        return tokens[:open_pos], int(content)


_parser = FieldDescriptorParser()


def parse_field(raw: str) -> FieldDescriptor:
    """Parse a field string with the shared parser."""
    return _parser.parse(raw)
