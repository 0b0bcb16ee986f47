"""
Pattern Set Loader - Read pattern sets from YAML and JSON files.

A file either holds a single pattern set (top-level ``fields`` key; the id is
taken from ``id`` or the file name) or a mapping of id -> pattern set body.

    # loginPage.pattern.yaml
    fields:
      button: "//button[text()='#{fieldName}']"

    # pages.yaml
    homePage:
      fields: {...}
    checkoutPage:
      fields: {...}
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import yaml
from pydantic import ValidationError

from pattern_locator.exceptions import ConfigurationError
from pattern_locator.patterns.models import PatternSet

logger = logging.getLogger(__name__)


PATTERN_FILE_SUFFIXES = (".yaml", ".yml", ".json")
_SINGLE_SET_KEYS = {"fields", "sections", "locations", "scroll", "label_eligible"}


class PatternSetLoader:
    """Load PatternSet models from files and directories."""

    def load_path(self, path: Union[str, Path]) -> List[PatternSet]:
        """
        Load every pattern set under a file or directory.

        Directories are scanned (non-recursively) in name order.

        Raises:
            ConfigurationError: If the path is missing or a file is invalid
        """
        path = Path(path).expanduser()
        if path.is_dir():
            pattern_sets: List[PatternSet] = []
            for child in sorted(path.iterdir()):
                if child.is_file() and child.suffix.lower() in PATTERN_FILE_SUFFIXES:
                    pattern_sets.extend(self.load_file(child))
            return pattern_sets
        if path.is_file():
            return self.load_file(path)
        raise ConfigurationError(f"Pattern path not found: {path}", {"path": str(path)})

    def load_paths(self, paths: Iterable[Union[str, Path]]) -> List[PatternSet]:
        pattern_sets: List[PatternSet] = []
        for path in paths:
            pattern_sets.extend(self.load_path(path))
        return pattern_sets

    def load_file(self, path: Path) -> List[PatternSet]:
        payload = self._read(path)
        if not isinstance(payload, dict):
            raise ConfigurationError(
                f"Pattern file {path} must contain a mapping",
                {"path": str(path)},
            )

        default_id = path.name.split(".")[0]
        pattern_sets = self.from_mapping(payload, default_id=default_id, source=str(path))
        logger.debug(f"Loaded {len(pattern_sets)} pattern set(s) from {path}")
        return pattern_sets

    def from_mapping(
        self,
        payload: Dict[str, Any],
        default_id: str | None = None,
        source: str = "<mapping>",
    ) -> List[PatternSet]:
        """
        Build pattern sets from an already-parsed mapping.

        Args:
            payload: Single pattern set body, or id -> body mapping
            default_id: Id for a single body without an ``id`` key
            source: Where the mapping came from, for error messages
        """
        if _SINGLE_SET_KEYS & payload.keys():
            body = dict(payload)
            body.setdefault("id", default_id)
            return [self._build(body, source)]

        pattern_sets = []
        for pattern_set_id, body in payload.items():
            if not isinstance(body, dict):
                raise ConfigurationError(
                    f"Pattern set '{pattern_set_id}' in {source} must be a mapping",
                    {"source": source, "pattern_set_id": pattern_set_id},
                )
            pattern_sets.append(self._build({"id": pattern_set_id, **body}, source))
        return pattern_sets

    def _build(self, body: Dict[str, Any], source: str) -> PatternSet:
        try:
            return PatternSet.model_validate(body)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid pattern set '{body.get('id')}' in {source}: {e}",
                {"source": source, "pattern_set_id": body.get("id")},
            ) from e

    def _read(self, path: Path) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            try:
                if path.suffix.lower() == ".json":
                    return json.load(f)
                return yaml.safe_load(f) or {}
            except (yaml.YAMLError, json.JSONDecodeError) as e:
                raise ConfigurationError(
                    f"Cannot parse pattern file {path}: {e}",
                    {"path": str(path)},
                ) from e
