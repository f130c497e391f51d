"""
Tesseract engine (pytesseract), implementing IOCREngine.

Text is rebuilt line by line from image_to_data so that one call yields
both the text and the word confidences. Confidence is the mean over words
with a non-negative confidence.
"""

import io
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

import pytesseract
from PIL import Image, UnidentifiedImageError
from loguru import logger

from config.settings import TESSERACT_CMD
from medextract.domain.contracts import EngineOptions, OCROutput
from ...domain.exceptions import OCRProviderError, OCRResponseError, OCRTimeoutError
from ...domain.interfaces import IOCREngine


def build_tesseract_config(options: EngineOptions) -> str:
    """Command-line config string for one call."""
    parts = [f"--psm {options.psm}", f"--oem {options.oem}"]
    if options.char_whitelist:
        parts.append(f"-c tessedit_char_whitelist={options.char_whitelist}")
    if options.preserve_interword_spaces:
        parts.append("-c preserve_interword_spaces=1")
    return " ".join(parts)


class TesseractOCREngine(IOCREngine):
    """Local Tesseract binary, one subprocess per call (reentrant)."""

    name = "tesseract"

    def __init__(self, tesseract_cmd: Optional[str] = None):
        cmd = tesseract_cmd or TESSERACT_CMD
        if cmd:
            pytesseract.pytesseract.tesseract_cmd = cmd
        logger.debug(f"[TesseractOCREngine] Using binary: {pytesseract.pytesseract.tesseract_cmd}")

    def recognize(
        self,
        image_content: bytes,
        locale: str,
        options: EngineOptions,
        timeout: float
    ) -> OCROutput:
        try:
            image = Image.open(io.BytesIO(image_content))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise OCRResponseError("Engine could not read the image", component="TesseractOCREngine", original_error=e)

        config = build_tesseract_config(options)
        try:
            data = pytesseract.image_to_data(
                image,
                lang=locale,
                config=config,
                output_type=pytesseract.Output.DICT,
                timeout=timeout,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise OCRProviderError("Tesseract binary not found", component="TesseractOCREngine", original_error=e)
        except pytesseract.TesseractError as e:
            raise OCRResponseError(f"Tesseract failed ({config})", component="TesseractOCREngine", original_error=e)
        except RuntimeError as e:
            # pytesseract signals a killed subprocess with a bare RuntimeError
            if "timeout" in str(e).lower():
                raise OCRTimeoutError(
                    f"Tesseract call exceeded {timeout:.1f}s",
                    component="TesseractOCREngine",
                    original_error=e
                )
            raise OCRResponseError("Tesseract failed", component="TesseractOCREngine", original_error=e)

        text, confidence = self._assemble(data)
        logger.trace(f"[TesseractOCREngine] {config}: {len(text)} chars, confidence {confidence:.0f}")
        return OCROutput(text=text, confidence=confidence)

    @staticmethod
    def _assemble(data: Dict[str, List]) -> Tuple[str, float]:
        """Joins words into lines (block, paragraph, line) and averages confidences."""
        lines: "OrderedDict[Tuple[int, int, int], List[str]]" = OrderedDict()
        confidences: List[float] = []

        for i, word in enumerate(data.get("text", [])):
            word = (word or "").strip()
            if not word:
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append(word)
            conf = float(data["conf"][i])
            if conf >= 0:
                confidences.append(conf)

        text = "\n".join(" ".join(words) for words in lines.values())
        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return text, confidence
