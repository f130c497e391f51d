from medextract.domain.contracts import EngineOptions
from medextract.extraction.infrastructure.adapters.tesseract_adapter import (
    TesseractOCREngine,
    build_tesseract_config,
)
from medextract.extraction.pre_ocr.engine_call import FAST_ENGINE_OPTIONS, STRICT_ENGINE_OPTIONS


def test_fast_config():
    assert build_tesseract_config(FAST_ENGINE_OPTIONS) == "--psm 3 --oem 3"


def test_strict_config():
    config = build_tesseract_config(STRICT_ENGINE_OPTIONS)

    assert config.startswith("--psm 6 --oem 1 -c tessedit_char_whitelist=0123456789")
    assert config.endswith("-c preserve_interword_spaces=1")


def test_custom_config():
    assert build_tesseract_config(EngineOptions(psm=11, oem=1)) == "--psm 11 --oem 1"


def test_assemble_groups_words_into_lines():
    data = {
        "text": ["", "Glucose", "95", "mg/dL", "", "Hemoglobin", "14.2"],
        "block_num": [0, 1, 1, 1, 1, 1, 1],
        "par_num": [0, 1, 1, 1, 1, 1, 1],
        "line_num": [0, 1, 1, 1, 2, 2, 2],
        "conf": [-1, 90, 80, 70, -1, 60, "100"],
    }

    text, confidence = TesseractOCREngine._assemble(data)

    assert text == "Glucose 95 mg/dL\nHemoglobin 14.2"
    assert confidence == 80.0


def test_assemble_empty_page():
    text, confidence = TesseractOCREngine._assemble({"text": [], "block_num": [], "par_num": [], "line_num": [], "conf": []})
    assert text == ""
    assert confidence == 0.0
