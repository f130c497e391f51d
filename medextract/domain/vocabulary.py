"""
Medical vocabulary loader.

One YAML file (config/medical_vocabulary.yaml) feeds two consumers:
- QualityScorer: keywords and unit fragments
- LabValueParser: canonical parameter names with aliases and categories
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Dict, List, Optional, Pattern, Tuple

import yaml
from loguru import logger

from config.settings import MEDICAL_VOCABULARY_FILE


@dataclass(frozen=True)
class ParameterAlias:
    alias: str
    canonical_name: str
    category: str


@dataclass(frozen=True)
class MedicalVocabulary:
    """Read-only vocabulary shared by scoring and parsing."""

    keywords: Tuple[str, ...]
    units: Tuple[str, ...]
    aliases: Tuple[ParameterAlias, ...]
    source_file: Optional[str] = None
    _unit_pattern: Pattern = field(init=False, repr=False, compare=False)

    _cache: ClassVar[Dict[str, "MedicalVocabulary"]] = {}

    def __post_init__(self) -> None:
        # Longest fragments first so "mg/dl" wins over "g/dl"
        fragments = sorted(self.units, key=len, reverse=True)
        alternation = "|".join(fragments) if fragments else r"(?!x)x"
        object.__setattr__(
            self,
            "_unit_pattern",
            re.compile(rf"\d+\.?\d*\s*(?:{alternation})(?![a-z])", re.IGNORECASE),
        )

    @property
    def unit_pattern(self) -> Pattern:
        """Matches a number immediately followed by a known unit."""
        return self._unit_pattern

    def count_keywords(self, text: str) -> int:
        """Number of distinct keywords present in ``text`` (case-insensitive)."""
        lowered = text.lower()
        return sum(1 for keyword in self.keywords if keyword in lowered)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "MedicalVocabulary":
        """
        Loads the vocabulary from YAML (cached per path).

        Args:
            path: YAML file, defaults to MEDICAL_VOCABULARY_FILE

        Returns:
            MedicalVocabulary

        Raises:
            FileNotFoundError: if the file is missing
            ValueError: if a required section is missing
        """
        path = Path(path or MEDICAL_VOCABULARY_FILE)
        cache_key = str(path.resolve())
        if cache_key in cls._cache:
            return cls._cache[cache_key]

        if not path.exists():
            raise FileNotFoundError(f"Medical vocabulary not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        for section in ("keywords", "units", "parameters"):
            if section not in data:
                raise ValueError(f"Section '{section}' missing in {path}")

        aliases: List[ParameterAlias] = []
        for canonical_name, entry in data["parameters"].items():
            category = entry.get("category", "General")
            for alias in entry.get("aliases", []):
                aliases.append(ParameterAlias(str(alias).lower(), canonical_name, category))
        # Longest alias first: "hdl cholesterol" before "cholesterol"
        aliases.sort(key=lambda a: len(a.alias), reverse=True)

        vocabulary = cls(
            keywords=tuple(str(k).lower() for k in data["keywords"]),
            units=tuple(str(u) for u in data["units"]),
            aliases=tuple(aliases),
            source_file=str(path),
        )
        cls._cache[cache_key] = vocabulary
        logger.debug(
            f"[MedicalVocabulary] Loaded {path.name}: {len(vocabulary.keywords)} keywords, "
            f"{len(vocabulary.units)} units, {len(vocabulary.aliases)} aliases"
        )
        return vocabulary

    @classmethod
    def clear_cache(cls) -> None:
        cls._cache.clear()
