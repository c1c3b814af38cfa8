"""
Loaders Module - PDF text extraction and loading.
"""

from .pdf_loader import (
    load_pdf,
    load_pdf_lines,
    is_valid_pdf_file,
    get_supported_formats,
    PDFLoadError
)

__all__ = [
    'load_pdf',
    'load_pdf_lines',
    'is_valid_pdf_file',
    'get_supported_formats',
    'PDFLoadError',
]
