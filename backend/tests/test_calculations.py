from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from tourdesk.services.calculations import (
    calculate_line_item, reverse_line_item, calculate_line_items, occupancy_multiplier,
    round_whole, summarize_finances, apply_running_balance, tds_amount, financial_period
)
from tourdesk.services.document_service import number_to_words, amount_in_words


def test_line_item_forward_applies_tax_on_subtotal():
    line = calculate_line_item(Decimal("3"), Decimal("1000"), Decimal("5"))
    assert line['subtotal'] == Decimal("3000.00")
    assert line['tax_amount'] == Decimal("150.00")
    assert line['total_amount'] == Decimal("3150.00")


def test_line_item_without_price_has_no_tax():
    line = calculate_line_item(Decimal("2"), Decimal("0"), Decimal("18"))
    assert line['tax_amount'] == Decimal("0")
    assert line['total_amount'] == Decimal("0.00")


def test_line_item_reverse_solves_unit_price_from_total():
    line = reverse_line_item(Decimal("2100"), Decimal("2"), Decimal("5"))
    assert line['price_per_unit'] == Decimal("1000.0000")
    assert line['tax_amount'] == Decimal("100.00")
    assert line['total_amount'] == Decimal("2100.00")


def test_line_items_only_reverse_the_changed_line():
    result = calculate_line_items([
        {'quantity': 1, 'price_per_unit': 500, 'tax_percentage': 0},
        {'quantity': 1, 'price_per_unit': 999, 'tax_percentage': 5, 'total_amount': 1050},
    ], changed_total_index=1)
    assert result['items'][0]['total_amount'] == Decimal("500.00")
    assert result['items'][1]['price_per_unit'] == Decimal("1000.0000")
    assert result['subtotal'] == Decimal("1500.00")
    assert result['total_tax'] == Decimal("50.00")
    assert result['grand_total'] == Decimal("1550.00")


@pytest.mark.parametrize("name, expected", [
    ("Per Person Single Occupancy", 1),
    ("Per Person Double Sharing", 2),
    ("TRIPLE room", 3),
    ("Quad sharing", 4),
    ("Extra Bed", 1),
    (None, 1),
])
def test_occupancy_multiplier(name, expected):
    assert occupancy_multiplier(name) == expected


def test_round_whole_rounds_half_away_from_zero():
    assert round_whole(Decimal("10.5")) == Decimal("11")
    assert round_whole(Decimal("10.49")) == Decimal("10")
    assert round_whole(Decimal("-2.5")) == Decimal("-3")


def test_summarize_finances_nets_returns_and_badges():
    summary = summarize_finances(
        sales=[SimpleNamespace(sale_price=Decimal("10000"), gst_amount=Decimal("500"))],
        purchases=[SimpleNamespace(price=Decimal("6000"), gst_amount=Decimal("300"))],
        sale_returns=[SimpleNamespace(amount=Decimal("500"), gst_amount=None)],
        purchase_returns=[],
        receipts=[SimpleNamespace(amount=Decimal("6000"))],
        payments=[SimpleNamespace(amount=Decimal("6300"))],
        expenses=[SimpleNamespace(amount=Decimal("200"))],
        incomes=[SimpleNamespace(amount=Decimal("100"))],
    )
    assert summary['sales_incl_gst'] == Decimal("10500.00")
    assert summary['net_sales'] == Decimal("10000.00")
    assert summary['net_purchases'] == Decimal("6300.00")
    assert summary['net_profit'] == Decimal("3600.00")
    assert summary['profit_status'] == "profitable"
    assert summary['receipt_percentage'] == Decimal("57")
    assert summary['receipt_status'] == "partial"
    assert summary['payment_status'] == "complete"
    assert summary['outstanding_receivable'] == Decimal("4000.00")
    assert summary['outstanding_payable'] == Decimal("0.00")


def test_summarize_finances_without_sales_is_pending():
    summary = summarize_finances([], [], [], [], [], [], [SimpleNamespace(amount=Decimal("50"))], [])
    assert summary['receipt_percentage'] == Decimal("0")
    assert summary['receipt_status'] == "pending"
    assert summary['profit_status'] == "loss"


def test_running_balance_sorts_stably_by_date():
    rows = [
        {'date': date(2024, 1, 5), 'inflow': Decimal("100"), 'outflow': Decimal("0"), 'tag': 'b'},
        {'date': date(2024, 1, 1), 'inflow': Decimal("0"), 'outflow': Decimal("30"), 'tag': 'a'},
        {'date': date(2024, 1, 5), 'inflow': Decimal("0"), 'outflow': Decimal("20"), 'tag': 'c'},
    ]
    closing = apply_running_balance(rows, Decimal("50"))
    assert [row['tag'] for row in rows] == ['a', 'b', 'c']
    assert [row['balance'] for row in rows] == [Decimal("20"), Decimal("120"), Decimal("100")]
    assert closing == Decimal("100")


def test_amount_in_words_uses_lakh_grouping():
    assert number_to_words(150000) == "One Lakh Fifty Thousand"
    assert amount_in_words(Decimal("1250.50")) == "Rupees One Thousand Two Hundred Fifty and Fifty Paise Only"


@pytest.mark.parametrize("day, expected", [
    (date(2024, 3, 31), ("2023-24", "Q4")),
    (date(2024, 4, 1), ("2024-25", "Q1")),
    (date(2024, 9, 30), ("2024-25", "Q2")),
    (date(2024, 12, 15), ("2024-25", "Q3")),
    (date(2000, 1, 10), ("1999-00", "Q4")),
])
def test_financial_period_starts_in_april(day, expected):
    assert financial_period(day) == expected


def test_tds_amount_rounds_to_paise():
    assert tds_amount("1234.56", "2") == Decimal("24.69")
    assert tds_amount(0, "10") == Decimal("0.00")
