"""
PDF access: text layer (pdfplumber) and page rasterization (pdf2image).
"""

import io
from typing import List, Optional

import pdfplumber
from loguru import logger
from pdf2image import convert_from_bytes
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from pdfminer.pdfparser import PDFSyntaxError as PDFMinerSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from config.settings import PDF_MAX_PAGES, PDF_RASTER_DPI, POPPLER_PATH
from ...domain.exceptions import DocumentParseError
from ...domain.interfaces import IPdfRasterizer, IPdfTextReader


class PdfPlumberTextReader(IPdfTextReader):
    """Embedded text layer, pages joined by newlines."""

    def read_text(self, buffer: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(buffer)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except (PdfminerException, PDFMinerSyntaxError, ValueError, KeyError, TypeError) as e:
            raise DocumentParseError("Failed to read PDF text layer", component="PdfPlumberTextReader", original_error=e)

        text = "\n".join(pages)
        logger.debug(f"[PdfPlumberTextReader] {len(pages)} pages, {len(text.strip())} chars")
        return text


class Pdf2ImageRasterizer(IPdfRasterizer):
    """Renders the first pages of a PDF to PNG (needs poppler)."""

    def __init__(
        self,
        dpi: int = PDF_RASTER_DPI,
        max_pages: int = PDF_MAX_PAGES,
        poppler_path: Optional[str] = POPPLER_PATH
    ):
        self.dpi = dpi
        self.max_pages = max_pages
        self.poppler_path = poppler_path

    def rasterize(self, buffer: bytes) -> List[bytes]:
        try:
            images = convert_from_bytes(
                buffer,
                dpi=self.dpi,
                first_page=1,
                last_page=self.max_pages,
                poppler_path=self.poppler_path,
            )
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError) as e:
            raise DocumentParseError("Failed to rasterize PDF", component="Pdf2ImageRasterizer", original_error=e)

        pages: List[bytes] = []
        for image in images:
            out = io.BytesIO()
            image.save(out, format="PNG")
            pages.append(out.getvalue())

        logger.debug(f"[Pdf2ImageRasterizer] Rendered {len(pages)} pages at {self.dpi} dpi")
        return pages
