"""
Lab value parser: raw report text -> health parameters.

Line-oriented heuristics:

    <name> [:|-|=] <value> [unit] [low - high | < x | > x] [H|L]
    <name> [:|-|=] Positive | Negative | Present | Absent | Reactive | ...

Only names found in the alias table of the medical vocabulary are kept,
under their canonical name and category. The first occurrence of a name
wins.
"""

import re
from typing import List, Optional, Tuple

from loguru import logger

from contracts.extraction_result_dto import (
    CategoricalParameter,
    HealthParameter,
    NumericParameter,
    ParameterStatus,
)
from medextract.domain.vocabulary import MedicalVocabulary, ParameterAlias
from medextract.extraction.domain.interfaces import IParameterParser

NUMBER = r"[-+]?\d+(?:\.\d+)?"

LEADING_INDEX = re.compile(r"^\s*\d{1,2}[.)]\s+")
SEPARATOR = re.compile(r"^[\s:=\-]+")
VALUE = re.compile(rf"^(?P<value>{NUMBER})")
RANGE = re.compile(rf"(?P<low>{NUMBER})\s*(?:-|–|to)\s*(?P<high>{NUMBER})", re.IGNORECASE)
BOUND = re.compile(rf"(?P<op>[<>]=?|≤|≥)\s*(?P<limit>{NUMBER})")
FLAG = re.compile(r"(?<!\S)(?P<flag>HIGH|LOW|H|L)(?!\S)")
# Unit missing from the vocabulary: one token, or "mmol L" with the slash lost
LOOSE_UNIT = re.compile(
    r"^\s*(?!(?:high|low|normal|h|l)(?!\S))"
    r"(?P<unit>[a-zµ%][\wµ%^.]*(?:/[\wµ^.]+)?)"
    r"(?:\s+(?P<per>[dmµu]?l)(?!\S))?",
    re.IGNORECASE,
)
CATEGORICAL = re.compile(
    r"^(?P<word>non[\s-]?reactive|positive|negative|present|absent|reactive|detected|not detected|nil|trace)\b",
    re.IGNORECASE,
)

PRESENT_WORDS = {"positive", "present", "reactive", "detected", "trace"}

MIN_LINE_LENGTH = 4


class LabValueParser(IParameterParser):
    """Regex parser over the lines of a lab report."""

    def __init__(self, vocabulary: Optional[MedicalVocabulary] = None):
        self.vocabulary = vocabulary or MedicalVocabulary.load()
        fragments = sorted(self.vocabulary.units, key=len, reverse=True)
        self.unit_pattern = re.compile(rf"^\s*(?P<unit>{'|'.join(fragments)})(?![a-z])", re.IGNORECASE)

    def extract(self, text: str) -> List[HealthParameter]:
        parameters: List[HealthParameter] = []
        seen = set()

        for line_number, line in enumerate((text or "").splitlines(), start=1):
            parameter = self.parse_line(line)
            if parameter is None:
                continue
            if parameter.name in seen:
                logger.trace(f"[LabValueParser] Duplicate {parameter.name!r} on line {line_number}, skipped")
                continue
            seen.add(parameter.name)
            parameters.append(parameter)

        logger.debug(f"[LabValueParser] Extracted {len(parameters)} parameters")
        return parameters

    def parse_line(self, line: str) -> Optional[HealthParameter]:
        """Parses one line, None if it carries no known parameter."""
        cleaned = LEADING_INDEX.sub("", line).strip()
        if len(cleaned) < MIN_LINE_LENGTH:
            return None

        match = self._match_alias(cleaned)
        if match is None:
            return None
        alias, rest = match
        rest = SEPARATOR.sub("", rest)

        categorical = CATEGORICAL.match(rest)
        if categorical:
            word = categorical.group("word")
            status = ParameterStatus.PRESENT if word.lower() in PRESENT_WORDS else ParameterStatus.ABSENT
            return CategoricalParameter(
                name=alias.canonical_name,
                text=word.title(),
                status=status,
                category=alias.category,
            )

        value_match = VALUE.match(rest)
        if value_match is None:
            return None
        value = float(value_match.group("value"))
        rest = rest[value_match.end():]

        unit = ""
        unit_match = self.unit_pattern.match(rest)
        if unit_match:
            unit = unit_match.group("unit")
            rest = rest[unit_match.end():]
        else:
            unit, rest = self._loose_unit(rest)

        normal_range, status = self._status_from_range(value, rest)
        if status == ParameterStatus.UNKNOWN:
            status = self._status_from_flag(rest)

        return NumericParameter(
            name=alias.canonical_name,
            value=value,
            unit=unit,
            normal_range=normal_range,
            status=status,
            category=alias.category,
        )

    def _match_alias(self, line: str) -> Optional[Tuple[ParameterAlias, str]]:
        lowered = line.lower()
        for alias in self.vocabulary.aliases:
            if not lowered.startswith(alias.alias):
                continue
            following = lowered[len(alias.alias):len(alias.alias) + 1]
            if following.isalpha():
                continue
            return alias, line[len(alias.alias):]
        return None

    @staticmethod
    def _status_from_range(value: float, rest: str) -> Tuple[str, ParameterStatus]:
        range_match = RANGE.search(rest)
        if range_match:
            low, high = float(range_match.group("low")), float(range_match.group("high"))
            normal_range = f"{range_match.group('low')}-{range_match.group('high')}"
            if value < low:
                return normal_range, ParameterStatus.LOW
            if value > high:
                return normal_range, ParameterStatus.HIGH
            return normal_range, ParameterStatus.NORMAL

        bound_match = BOUND.search(rest)
        if bound_match:
            op, limit = bound_match.group("op"), float(bound_match.group("limit"))
            normal_range = f"{op}{bound_match.group('limit')}"
            if op in ("<", "<=", "≤"):
                return normal_range, ParameterStatus.HIGH if value > limit else ParameterStatus.NORMAL
            return normal_range, ParameterStatus.LOW if value < limit else ParameterStatus.NORMAL

        return "N/A", ParameterStatus.UNKNOWN

    @staticmethod
    def _status_from_flag(rest: str) -> ParameterStatus:
        flag_match = FLAG.search(rest)
        if flag_match is None:
            return ParameterStatus.UNKNOWN
        return ParameterStatus.HIGH if flag_match.group("flag").startswith("H") else ParameterStatus.LOW

    @staticmethod
    def _loose_unit(rest: str) -> Tuple[str, str]:
        """Takes an unrecognised unit off the front of ``rest``."""
        match = LOOSE_UNIT.match(rest)
        if match is None:
            return "", rest
        unit, end = match.group("unit"), match.end("unit")
        if match.group("per") and "/" not in unit:
            unit, end = f"{unit}/{match.group('per')}", match.end()
        return unit, rest[end:]
