"""
Pure calculations: line items, occupancy factors, per-query summaries, running balances, TDS
"""
from decimal import Decimal, ROUND_HALF_UP
from datetime import date
from typing import Iterable, List, Optional, Tuple

from tourdesk.services.common import round2, round4, to_decimal

ZERO = Decimal("0")


# ==================== LINE ITEMS ====================

def calculate_line_item(quantity, price_per_unit, tax_percentage=None) -> dict:
    """Forward calculation of one line from price and quantity"""
    price = round4(price_per_unit)
    qty = round2(quantity)
    rate = to_decimal(tax_percentage)
    subtotal = round2(price * qty)
    tax_amount = ZERO
    if price > 0 and qty > 0 and rate > 0:
        tax_amount = round2(subtotal * rate / 100)
    return {
        'quantity': qty,
        'price_per_unit': price,
        'tax_percentage': rate,
        'subtotal': subtotal,
        'tax_amount': tax_amount,
        'total_amount': round2(subtotal + tax_amount),
    }


def reverse_line_item(total_amount, quantity, tax_percentage=None) -> dict:
    """Derive the unit price from an edited tax-inclusive total"""
    total = round2(total_amount)
    qty = round2(quantity)
    rate = to_decimal(tax_percentage)
    if qty <= 0:
        return calculate_line_item(qty, ZERO, rate)

    price = round4(total / (1 + rate / 100) / qty)
    subtotal = round2(price * qty)
    return {
        'quantity': qty,
        'price_per_unit': price,
        'tax_percentage': rate,
        'subtotal': subtotal,
        'tax_amount': round2(total - price * qty),
        'total_amount': total,
    }


def calculate_line_items(items: List[dict], changed_total_index: Optional[int] = None) -> dict:
    """
    Recalculate every line. The line at changed_total_index is solved
    backwards from its total; all others forward from price and quantity.
    """
    lines = []
    for index, item in enumerate(items):
        if index == changed_total_index and item.get('total_amount') is not None:
            line = reverse_line_item(item['total_amount'], item.get('quantity'), item.get('tax_percentage'))
        else:
            line = calculate_line_item(item.get('quantity'), item.get('price_per_unit'), item.get('tax_percentage'))
        line['product_name'] = item.get('product_name')
        line['tax_slab_id'] = item.get('tax_slab_id')
        lines.append(line)

    subtotal = round2(sum((line['subtotal'] for line in lines), ZERO))
    total_tax = round2(sum((line['tax_amount'] for line in lines), ZERO))
    return {
        'items': lines,
        'subtotal': subtotal,
        'total_tax': total_tax,
        'grand_total': round2(subtotal + total_tax),
    }


# ==================== PACKAGE PRICING ====================

def occupancy_multiplier(attribute_name: Optional[str]) -> int:
    """Persons per room implied by a pricing attribute name"""
    name = (attribute_name or "").lower()
    if "single" in name:
        return 1
    if "double" in name:
        return 2
    if "triple" in name:
        return 3
    if "quad" in name:
        return 4
    return 1


def round_whole(value) -> Decimal:
    """Round half away from zero to a whole number"""
    return to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


# ==================== QUERY SUMMARY ====================

def payment_badge(ratio: Decimal) -> str:
    if ratio >= 1:
        return "complete"
    if ratio >= Decimal("0.5"):
        return "partial"
    return "pending"


def _sum(values: Iterable) -> Decimal:
    return sum((to_decimal(value) for value in values), ZERO)


def summarize_finances(sales, purchases, sale_returns, purchase_returns,
                       receipts, payments, expenses, incomes) -> dict:
    """Totals of one tour package query from its stored records"""
    total_sales = _sum(s.sale_price for s in sales)
    sales_gst = _sum(s.gst_amount for s in sales)
    total_purchases = _sum(p.price for p in purchases)
    purchases_gst = _sum(p.gst_amount for p in purchases)
    total_sale_returns = _sum(r.amount for r in sale_returns)
    sale_returns_gst = _sum(r.gst_amount for r in sale_returns)
    total_purchase_returns = _sum(r.amount for r in purchase_returns)
    purchase_returns_gst = _sum(r.gst_amount for r in purchase_returns)
    total_receipts = _sum(r.amount for r in receipts)
    total_payments = _sum(p.amount for p in payments)
    total_expenses = _sum(e.amount for e in expenses)
    total_incomes = _sum(i.amount for i in incomes)

    sales_incl_gst = total_sales + sales_gst
    purchases_incl_gst = total_purchases + purchases_gst
    net_sales = sales_incl_gst - total_sale_returns
    net_purchases = purchases_incl_gst - total_purchase_returns
    net_profit = net_sales + total_incomes - (net_purchases + total_expenses)

    receipt_ratio = total_receipts / sales_incl_gst if sales_incl_gst > 0 else ZERO
    payment_ratio = total_payments / purchases_incl_gst if purchases_incl_gst > 0 else ZERO

    return {
        'total_sales': round2(total_sales),
        'sales_gst': round2(sales_gst),
        'sales_incl_gst': round2(sales_incl_gst),
        'total_purchases': round2(total_purchases),
        'purchases_gst': round2(purchases_gst),
        'purchases_incl_gst': round2(purchases_incl_gst),
        'total_sale_returns': round2(total_sale_returns),
        'sale_returns_gst': round2(sale_returns_gst),
        'total_purchase_returns': round2(total_purchase_returns),
        'purchase_returns_gst': round2(purchase_returns_gst),
        'total_receipts': round2(total_receipts),
        'total_payments': round2(total_payments),
        'total_expenses': round2(total_expenses),
        'total_incomes': round2(total_incomes),
        'net_sales': round2(net_sales),
        'net_purchases': round2(net_purchases),
        'net_profit': round2(net_profit),
        'profit_status': "profitable" if net_profit >= 0 else "loss",
        'receipt_percentage': round_whole(receipt_ratio * 100),
        'payment_percentage': round_whole(payment_ratio * 100),
        'receipt_status': payment_badge(receipt_ratio),
        'payment_status': payment_badge(payment_ratio),
        'outstanding_receivable': round2(net_sales - total_receipts),
        'outstanding_payable': round2(net_purchases - total_payments),
    }


# ==================== BOOKS ====================

def apply_running_balance(rows: List[dict], opening_balance) -> Decimal:
    """
    Sort rows by date (stable) and write each row's balance in place.
    Returns the closing balance.
    """
    rows.sort(key=lambda row: row['date'])
    balance = to_decimal(opening_balance)
    for row in rows:
        balance = balance + to_decimal(row.get('inflow')) - to_decimal(row.get('outflow'))
        row['balance'] = balance
    return balance


# ==================== TDS ====================

def tds_amount(base_amount, rate) -> Decimal:
    return round2(to_decimal(base_amount) * to_decimal(rate) / 100)


def financial_period(day: date) -> Tuple[str, str]:
    """Indian financial year (April to March) and quarter, e.g. ("2024-25", "Q4")"""
    start = day.year if day.month >= 4 else day.year - 1
    quarter = (day.month - 4) % 12 // 3 + 1
    return f"{start}-{str(start + 1)[-2:]}", f"Q{quarter}"
