"""Shared fixtures for statement extractor tests."""

import logging

import fitz  # PyMuPDF
import pytest

STATEMENT_TEXT = """
STATEMENT OF ACCOUNT
Account No: 000123456789
01/12/2023 01/12/2023 HEADER SAMPLE ROW 999.00  1000.00CR
Date Value Date Narration Debit Credit Balance
BALANCE B/F 10500.00CR
01/01/2024 01/01/2024 UPI Debit Paytm 500.00  10000.00CR
Ref: XYZ123
02/01/2024 02/01/2024 NEFT SALARY ACME  25000.00 35000.00CR
CORP LTD
Page No: 1
03/01/2024 03/01/2024 POS NETFLIX 649.00  34351.00CR
"""

# left edges of the text columns and right edges of the amount columns (points)
COLUMNS = (40, 100, 160, 360, 430, 510)
AMOUNT_COLUMNS = 3
FONT_SIZE = 9

PAGE_ONE_ROWS = [
    ("STATEMENT OF ACCOUNT",),
    ("BALANCE B/F", "", "", "", "", "10500.00CR"),
    ("01/01/2024", "01/01/2024", "UPI Debit Paytm", "500.00", "", "10000.00CR"),
    ("Ref: XYZ123",),
    ("02/01/2024", "02/01/2024", "NEFT SALARY ACME", "", "25000.00", "35000.00CR"),
    ("CORP LTD",),
    ("Page No: 1",),
]

PAGE_TWO_ROWS = [
    ("03/01/2024", "03/01/2024", "ELECTRICITY BILL", "1200.00", "", "33800.00CR"),
    ("BESCOM ONLINE",),
]


def write_pdf(path, pages):
    """Write statement rows onto PDF pages, one row per baseline, amounts right-aligned."""
    doc = fitz.open()
    for rows in pages:
        page = doc.new_page()
        y = 60
        for row in rows:
            for index, (x, text) in enumerate(zip(COLUMNS, row)):
                if not text:
                    continue
                if index >= AMOUNT_COLUMNS:
                    x -= fitz.get_text_length(text, fontsize=FONT_SIZE)
                page.insert_text((x, y), text, fontsize=FONT_SIZE)
            y += 18
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def statement_text():
    return STATEMENT_TEXT


@pytest.fixture
def statement_pdf(tmp_path):
    return write_pdf(tmp_path / "statement.pdf", [PAGE_ONE_ROWS, PAGE_TWO_ROWS])


@pytest.fixture
def no_marker_pdf(tmp_path):
    return write_pdf(tmp_path / "no_marker.pdf", [[("Some unrelated document",), ("Nothing to see",)]])


@pytest.fixture
def blank_pdf(tmp_path):
    return write_pdf(tmp_path / "blank.pdf", [[]])


@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
