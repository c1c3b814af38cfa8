"""
Output Module - PDF report generation and formatting.
"""

from .writer import (
    PDFReportWriter,
    generate_pdf_report,
    group_by_category
)

__all__ = [
    'PDFReportWriter',
    'generate_pdf_report',
    'group_by_category',
]
