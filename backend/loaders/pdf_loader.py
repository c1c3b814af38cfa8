"""
PDF Loader Module
Renders multi-page bank statement PDFs into ordered text lines using PyMuPDF (fitz).
"""

import fitz  # PyMuPDF
import logging
import re
from pathlib import Path

from config import config

logger = logging.getLogger(__name__)

# Words whose baselines differ by less than this (points) share a line
ROW_TOLERANCE = 2.0

# Horizontal gap (points) that separates two cells of the same line
COLUMN_GAP = 10.0

# Right edges closer than this (points) belong to the same amount column
COLUMN_TOLERANCE = 3.0

NUMERIC_CELL = re.compile(r"^[\d,.]+(?:\s*CR)?$", re.IGNORECASE)


class PDFLoadError(Exception):
    """Custom exception for PDF loading errors."""
    pass


def is_valid_pdf_file(file_path: str) -> bool:
    """Check the file extension against the supported formats."""
    return Path(file_path).suffix.lower() in config.ALLOWED_FILE_TYPES


def get_supported_formats() -> list[str]:
    """List of statement file extensions the loader accepts."""
    return list(config.ALLOWED_FILE_TYPES)


def page_rows(page) -> list[list[tuple[float, float, str]]]:
    """
    Group the words of one page into visual lines.

    A new line starts whenever the baseline of the next word moves by
    more than ROW_TOLERANCE.

    Args:
        page: fitz.Page

    Returns:
        Rows in top-to-bottom order, each a list of (x0, x1, text) words
    """
    words = sorted(page.get_text("words"), key=lambda w: (w[3], w[0]))

    rows = []
    current = []
    current_y = None

    for word in words:
        x0, y0, x1, y1, text = word[:5]
        if current_y is None or abs(y1 - current_y) > ROW_TOLERANCE:
            if current:
                rows.append(current)
            current = []
            current_y = y1
        current.append((x0, x1, text))

    if current:
        rows.append(current)

    return rows


def merge_cells(row: list[tuple[float, float, str]]) -> list[tuple[float, float, str]]:
    """Merge neighbouring words of a row into cells, left to right."""
    cells = []
    for x0, x1, text in sorted(row):
        if cells and x0 - cells[-1][1] <= COLUMN_GAP:
            start, _, joined = cells[-1]
            cells[-1] = (start, x1, f"{joined} {text}")
        else:
            cells.append((x0, x1, text))
    return cells


def find_amount_columns(rows: list[list[tuple[float, float, str]]]) -> list[float]:
    """
    Locate the right-aligned amount columns of a document.

    Every numeric cell votes with its right edge; edges within
    COLUMN_TOLERANCE of each other are one column.
    """
    edges = sorted(
        x1 for row in rows for x0, x1, text in row if NUMERIC_CELL.match(text)
    )

    clusters = []
    for edge in edges:
        if clusters and edge - clusters[-1][-1] <= COLUMN_TOLERANCE:
            clusters[-1].append(edge)
        else:
            clusters.append([edge])

    return [sum(cluster) / len(cluster) for cluster in clusters]


def join_cells(cells: list[tuple[float, float, str]], columns: list[float]) -> str:
    """
    Render a row of cells as one text line.

    Cells are separated by a single space plus one extra space for every
    amount column left empty between them, so a blank debit or credit
    field stays visible in the text.
    """
    parts = [cells[0][2]]
    for previous, cell in zip(cells, cells[1:]):
        skipped = sum(
            1 for edge in columns
            if previous[1] + COLUMN_TOLERANCE < edge < cell[1] - COLUMN_TOLERANCE
        )
        parts.append(" " * (1 + skipped))
        parts.append(cell[2])
    return "".join(parts)


def load_pdf_lines(file_path: str) -> list[str]:
    """
    Extract text lines from all pages of a PDF file.

    Args:
        file_path: Path to the PDF file

    Returns:
        Lines from every page, in reading order

    Raises:
        PDFLoadError: If the PDF cannot be loaded or read
    """
    # Validate file exists
    pdf_path = Path(file_path)
    if not pdf_path.exists():
        logger.error(f"PDF file not found: {file_path}")
        raise PDFLoadError(f"PDF file not found: {file_path}")

    if not is_valid_pdf_file(file_path):
        logger.error(f"File is not a PDF: {file_path}")
        raise PDFLoadError(f"File is not a PDF: {file_path}")

    doc = None
    try:
        # Open PDF document
        doc = fitz.open(file_path)

        # Check if PDF has pages
        if doc.page_count == 0:
            logger.error(f"PDF has no pages: {file_path}")
            raise PDFLoadError(f"PDF has no pages: {file_path}")

        logger.info(f"Loading PDF: {file_path} ({doc.page_count} pages)")

        rows = []
        empty_pages = 0

        for page_num in range(doc.page_count):
            page_cells = [merge_cells(row) for row in page_rows(doc[page_num])]

            if page_cells:
                rows.extend(page_cells)
                logger.debug(f"Page {page_num + 1}: found {len(page_cells)} lines")
            else:
                empty_pages += 1
                logger.warning(f"Page {page_num + 1}: empty or no extractable text")

        columns = find_amount_columns(rows)
        logger.debug(f"Detected {len(columns)} amount columns at {columns}")

        lines = [join_cells(cells, columns) for cells in rows]

        logger.info(
            f"Extraction complete: {len(lines)} lines from "
            f"{doc.page_count - empty_pages} pages ({empty_pages} empty pages skipped)"
        )

        return lines

    except fitz.FileDataError as e:
        logger.error(f"Invalid or corrupted PDF file: {file_path}", exc_info=True)
        raise PDFLoadError(f"Invalid or corrupted PDF file: {file_path}") from e

    except PDFLoadError:
        raise

    except Exception as e:
        logger.error(f"Unexpected error loading PDF {file_path}: {e}", exc_info=True)
        raise PDFLoadError(f"Failed to load PDF {file_path}: {str(e)}") from e

    finally:
        # Ensure PDF is always closed
        if doc is not None:
            doc.close()
            logger.debug(f"PDF document closed: {file_path}")


def load_pdf(file_path: str) -> str:
    """
    Extract the text of a PDF file, one visual line per text line.

    Args:
        file_path: Path to the PDF file

    Returns:
        Rendered text (may be empty for image-only PDFs)

    Raises:
        PDFLoadError: If the PDF cannot be loaded or read
    """
    return "\n".join(load_pdf_lines(file_path))
