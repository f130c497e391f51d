from typing import List

import pytest

from contracts.extraction_result_dto import NumericParameter
from medextract.domain.vocabulary import MedicalVocabulary
from tests.doubles import make_page, numeric


@pytest.fixture(scope="session")
def vocabulary() -> MedicalVocabulary:
    return MedicalVocabulary.load()


@pytest.fixture
def blank_page() -> bytes:
    return make_page()


@pytest.fixture
def sample_parameters() -> List[NumericParameter]:
    return [
        numeric("Fasting Blood Sugar", 126, status="High"),
        numeric("Hemoglobin", 14.2, unit="g/dL"),
    ]
