from functools import lru_cache
from typing import Dict, Iterable, Iterator, List, Optional

import structlog
from pydantic import ValidationError

from emgdx.core.exceptions import PatternNotFoundError, ReferenceDataError, UnknownNerveError
from emgdx.data.muscles import DEFAULT_MUP_RANGES, MUSCLE_REFERENCES
from emgdx.data.nerves import NERVE_REFERENCES
from emgdx.data.patterns import DIAGNOSTIC_PATTERNS
from emgdx.schemas.pattern import DiagnosticPattern, ParameterCategory
from emgdx.schemas.reference import MuscleReference, NerveReference, ReferenceRange

logger = structlog.get_logger()


class PatternLibrary:
    """
    Ordered, read-only collection of diagnostic patterns.
    Declaration order is preserved; it breaks score ties.
    """

    def __init__(self, patterns: Iterable[DiagnosticPattern]):
        self._patterns: Dict[str, DiagnosticPattern] = {}
        for pattern in patterns:
            if pattern.id in self._patterns:
                raise ReferenceDataError(f"Duplicate pattern id '{pattern.id}'")
            self._patterns[pattern.id] = pattern

    @classmethod
    def from_definitions(cls, definitions: Iterable[dict]) -> "PatternLibrary":
        patterns = []
        for definition in definitions:
            try:
                pattern = DiagnosticPattern.model_validate(definition)
            except ValidationError as e:
                raise ReferenceDataError(
                    f"Invalid pattern definition '{definition.get('id')}': {e}"
                ) from e
            for finding in pattern.key_findings:
                if finding.parameter.category == ParameterCategory.UNKNOWN:
                    logger.warning(
                        "unknown_parameter_path",
                        pattern_id=pattern.id,
                        parameter=finding.parameter.raw,
                    )
            patterns.append(pattern)
        return cls(patterns)

    def get(self, pattern_id: str) -> DiagnosticPattern:
        try:
            return self._patterns[pattern_id]
        except KeyError:
            raise PatternNotFoundError(pattern_id) from None

    def __iter__(self) -> Iterator[DiagnosticPattern]:
        return iter(self._patterns.values())

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, pattern_id: str) -> bool:
        return pattern_id in self._patterns

    def ids(self) -> List[str]:
        return list(self._patterns)


class ReferenceDataStore:
    """Immutable reference tables, built once and passed to whatever needs them."""

    def __init__(
        self,
        nerves: Iterable[NerveReference],
        muscles: Iterable[MuscleReference],
        patterns: PatternLibrary,
    ):
        self.nerves: Dict[str, NerveReference] = _index(nerves, "nerve")
        self.muscles: Dict[str, MuscleReference] = _index(muscles, "muscle")
        self.patterns = patterns
        self.default_mup_ranges = {
            field: ReferenceRange(**bounds) for field, bounds in DEFAULT_MUP_RANGES.items()
        }

    @classmethod
    def load_default(cls) -> "ReferenceDataStore":
        try:
            nerves = [NerveReference.model_validate(row) for row in NERVE_REFERENCES]
            muscles = [MuscleReference.model_validate(row) for row in MUSCLE_REFERENCES]
        except ValidationError as e:
            raise ReferenceDataError(f"Invalid reference table: {e}") from e
        store = cls(nerves, muscles, PatternLibrary.from_definitions(DIAGNOSTIC_PATTERNS))
        logger.info(
            "reference_data_loaded",
            nerves=len(store.nerves),
            muscles=len(store.muscles),
            patterns=len(store.patterns),
        )
        return store

    def nerve(self, nerve_id: str) -> NerveReference:
        try:
            return self.nerves[nerve_id]
        except KeyError:
            raise UnknownNerveError(nerve_id) from None

    def muscle(self, muscle_id: str) -> Optional[MuscleReference]:
        return self.muscles.get(muscle_id)

    def pattern(self, pattern_id: str) -> DiagnosticPattern:
        return self.patterns.get(pattern_id)

    def mup_range(self, muscle_id: str, field: str) -> Optional[ReferenceRange]:
        muscle = self.muscles.get(muscle_id)
        if muscle is not None:
            return muscle.range_for(field)
        return self.default_mup_ranges.get(field)

    def ncs_range(self, nerve_id: str, field: str) -> Optional[ReferenceRange]:
        nerve = self.nerves.get(nerve_id)
        return nerve.range_for(field) if nerve is not None else None


def _index(rows, kind: str) -> dict:
    indexed = {}
    for row in rows:
        if row.id in indexed:
            raise ReferenceDataError(f"Duplicate {kind} id '{row.id}'")
        indexed[row.id] = row
    return indexed


# Dependency for FastAPI Routes
@lru_cache(maxsize=1)
def get_reference_store() -> ReferenceDataStore:
    return ReferenceDataStore.load_default()
