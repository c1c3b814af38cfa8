"""Tests for the keyword categorizer."""

import re

import pytest

from extractors.categorizer import (
    CATEGORIES,
    CATEGORY_RULES,
    CategoryRule,
    categorize_transaction,
)


@pytest.mark.parametrize("description,expected", [
    ("NEFT SALARY ACME CORP", "Salary"),
    ("Payroll credit March", "Salary"),
    ("SB INTEREST CREDITED", "Investment"),
    ("CREDIT RFND AMAZON", "Investment"),
    ("Swiggy food order", "Food & Dining"),
    ("Sharma Dhaba", "Food & Dining"),
    ("BIG BAZAAR SUPERMARKET", "Food & Dining"),
    ("HP FUEL STATION", "Transportation"),
    ("UBER TRIP 8812", "Transportation"),
    ("AMAZON PAY INDIA", "Shopping"),
    ("FLIPKART INTERNET PVT", "Shopping"),
    ("UPI Debit Paytm Ref: XYZ123", "Shopping"),
    ("SPOTIFY PREMIUM", "Entertainment"),
    ("ELECTRICITY BILL BESCOM", "Bills & Utilities"),
    ("AIRTEL WIFI", "Bills & Utilities"),
    ("Apollo Pharmacy", "Healthcare"),
    ("TAJ HOTEL", "Travel"),
    ("INDIGO FLIGHT", "Travel"),
])
def test_categorize_keywords(description, expected):
    assert categorize_transaction(description, is_expense=True) == expected


def test_first_matching_rule_wins():
    assert categorize_transaction("salary netflix", is_expense=False) == "Salary"
    assert categorize_transaction("refund for movie tickets", is_expense=False) == "Investment"


def test_match_is_case_insensitive():
    assert categorize_transaction("NeTfLiX.CoM", is_expense=True) == "Entertainment"


def test_unmatched_falls_back_by_direction():
    assert categorize_transaction("CHQ DEP 004512", is_expense=True) == "Other Expenses"
    assert categorize_transaction("CHQ DEP 004512", is_expense=False) == "Other Income"


@pytest.mark.parametrize("description", ["", None, 123, ["salary"]])
def test_non_text_input_degrades_to_default(description):
    assert categorize_transaction(description, is_expense=True) == "Other Expenses"
    assert categorize_transaction(description, is_expense=False) == "Other Income"


def test_categorizer_is_deterministic():
    results = {categorize_transaction("UPI Debit Paytm", True) for _ in range(5)}
    assert results == {"Shopping"}


def test_custom_rule_table():
    rules = (CategoryRule("Travel", re.compile(r"irctc")),)
    assert categorize_transaction("IRCTC TICKET", True, rules=rules) == "Travel"
    assert categorize_transaction("NETFLIX", True, rules=rules) == "Other Expenses"


def test_rule_categories_belong_to_closed_set():
    assert all(rule.category in CATEGORIES for rule in CATEGORY_RULES)
    assert len(CATEGORIES) == 11
