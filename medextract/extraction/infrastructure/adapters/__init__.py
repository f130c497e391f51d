"""
Adapters of the Extraction domain: concrete OCR engines and PDF access.
"""

from .pdf_adapters import Pdf2ImageRasterizer, PdfPlumberTextReader
from .tesseract_adapter import TesseractOCREngine

__all__ = [
    "TesseractOCREngine",
    "PdfPlumberTextReader",
    "Pdf2ImageRasterizer",
]
