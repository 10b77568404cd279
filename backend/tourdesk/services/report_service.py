"""
Report Service - Customer/Supplier Ledgers, Profit and GST Reports
"""
from typing import Optional, List, Dict
from sqlalchemy.orm import Session, selectinload
from decimal import Decimal
from datetime import date

from tourdesk.models import (
    Customer, Supplier, SaleDetail, SaleReturn, PurchaseDetail, PurchaseReturn,
    ReceiptDetail, PaymentDetail, ExpenseDetail, IncomeDetail, TourPackageQuery
)
from tourdesk.services.calculations import apply_running_balance
from tourdesk.services.common import to_decimal, round2

ZERO = Decimal("0")


def _in_range(query, column, start_date: date = None, end_date: date = None):
    if start_date:
        query = query.filter(column >= start_date)
    if end_date:
        query = query.filter(column <= end_date)
    return query


def _ledger_rows(rows: List[dict]) -> List[dict]:
    return [
        {
            'date': row['date'].isoformat(),
            'type': row['type'],
            'reference': row.get('reference'),
            'description': row.get('description'),
            'tour_package_query_id': row.get('tour_package_query_id'),
            'debit': float(row['inflow']),
            'credit': float(row['outflow']),
            'balance': float(round2(row['balance'])),
        }
        for row in rows
    ]


def _month(value: date) -> str:
    return value.strftime("%Y-%m")


class ReportService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== CUSTOMER LEDGER ====================

    def _customer_rows(self, customer_id: int, start_date: date = None, end_date: date = None) -> List[dict]:
        """Sales debit the customer; sale returns and receipts credit it"""
        rows = []
        sales = _in_range(
            self.db.query(SaleDetail).filter(SaleDetail.customer_id == customer_id),
            SaleDetail.sale_date, start_date, end_date
        ).all()
        for sale in sales:
            rows.append({
                'date': sale.sale_date,
                'type': "Sale",
                'reference': sale.invoice_number,
                'description': sale.description,
                'tour_package_query_id': sale.tour_package_query_id,
                'inflow': to_decimal(sale.sale_price) + to_decimal(sale.gst_amount),
                'outflow': ZERO,
            })

        returns = _in_range(
            self.db.query(SaleReturn).join(SaleDetail).filter(SaleDetail.customer_id == customer_id),
            SaleReturn.return_date, start_date, end_date
        ).all()
        for sale_return in returns:
            rows.append({
                'date': sale_return.return_date,
                'type': "Sale Return",
                'reference': sale_return.reference,
                'description': sale_return.return_reason,
                'tour_package_query_id': sale_return.sale_detail.tour_package_query_id,
                'inflow': ZERO,
                'outflow': to_decimal(sale_return.amount),
            })

        receipts = _in_range(
            self.db.query(ReceiptDetail).filter(ReceiptDetail.customer_id == customer_id),
            ReceiptDetail.receipt_date, start_date, end_date
        ).all()
        for receipt in receipts:
            rows.append({
                'date': receipt.receipt_date,
                'type': "Receipt",
                'reference': receipt.reference,
                'description': receipt.note,
                'tour_package_query_id': receipt.tour_package_query_id,
                'inflow': ZERO,
                'outflow': to_decimal(receipt.amount),
            })
        return rows

    def get_customer_ledger(self, customer_id: int, start_date: date = None,
                            end_date: date = None) -> Optional[Dict]:
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            return None
        rows = self._customer_rows(customer_id, start_date, end_date)
        balance = apply_running_balance(rows, ZERO)
        return {
            'customer_id': customer.id,
            'customer_name': customer.name,
            'total_debit': float(round2(sum((r['inflow'] for r in rows), ZERO))),
            'total_credit': float(round2(sum((r['outflow'] for r in rows), ZERO))),
            'balance': float(round2(balance)),
            'entries': _ledger_rows(rows),
        }

    def get_customer_summary(self) -> List[Dict]:
        """Outstanding balance per customer"""
        summary = []
        for customer in self.db.query(Customer).order_by(Customer.name).all():
            rows = self._customer_rows(customer.id)
            total_sales = sum((r['inflow'] for r in rows), ZERO)
            total_credits = sum((r['outflow'] for r in rows), ZERO)
            summary.append({
                'customer_id': customer.id,
                'customer_name': customer.name,
                'contact': customer.contact,
                'total_sales': float(round2(total_sales)),
                'total_received': float(round2(total_credits)),
                'balance': float(round2(total_sales - total_credits)),
            })
        return summary

    # ==================== SUPPLIER LEDGER ====================

    def _supplier_rows(self, supplier_id: int, start_date: date = None, end_date: date = None) -> List[dict]:
        """
        Purchases credit the supplier; purchase returns and payments debit it.
        The running balance is what is owed to the supplier, so credits are
        carried as inflow.
        """
        rows = []
        purchases = _in_range(
            self.db.query(PurchaseDetail).filter(PurchaseDetail.supplier_id == supplier_id),
            PurchaseDetail.purchase_date, start_date, end_date
        ).all()
        for purchase in purchases:
            rows.append({
                'date': purchase.purchase_date,
                'type': "Purchase",
                'reference': purchase.bill_number,
                'description': purchase.description,
                'tour_package_query_id': purchase.tour_package_query_id,
                'inflow': to_decimal(purchase.price) + to_decimal(purchase.gst_amount),
                'outflow': ZERO,
            })

        returns = _in_range(
            self.db.query(PurchaseReturn).join(PurchaseDetail).filter(PurchaseDetail.supplier_id == supplier_id),
            PurchaseReturn.return_date, start_date, end_date
        ).all()
        for purchase_return in returns:
            rows.append({
                'date': purchase_return.return_date,
                'type': "Purchase Return",
                'reference': purchase_return.reference,
                'description': purchase_return.return_reason,
                'tour_package_query_id': purchase_return.purchase_detail.tour_package_query_id,
                'inflow': ZERO,
                'outflow': to_decimal(purchase_return.amount),
            })

        payments = _in_range(
            self.db.query(PaymentDetail).filter(PaymentDetail.supplier_id == supplier_id),
            PaymentDetail.payment_date, start_date, end_date
        ).all()
        for payment in payments:
            rows.append({
                'date': payment.payment_date,
                'type': "Payment",
                'reference': payment.transaction_id,
                'description': payment.note,
                'tour_package_query_id': payment.tour_package_query_id,
                'inflow': ZERO,
                'outflow': to_decimal(payment.amount),
            })
        return rows

    def get_supplier_ledger(self, supplier_id: int, start_date: date = None,
                            end_date: date = None) -> Optional[Dict]:
        supplier = self.db.query(Supplier).filter(Supplier.id == supplier_id).first()
        if not supplier:
            return None
        rows = self._supplier_rows(supplier_id, start_date, end_date)
        balance = apply_running_balance(rows, ZERO)
        entries = [
            {**entry, 'credit': entry['debit'], 'debit': entry['credit']}
            for entry in _ledger_rows(rows)
        ]
        return {
            'supplier_id': supplier.id,
            'supplier_name': supplier.name,
            'total_credit': float(round2(sum((r['inflow'] for r in rows), ZERO))),
            'total_debit': float(round2(sum((r['outflow'] for r in rows), ZERO))),
            'balance': float(round2(balance)),
            'entries': entries,
        }

    def get_supplier_summary(self) -> List[Dict]:
        summary = []
        for supplier in self.db.query(Supplier).order_by(Supplier.name).all():
            rows = self._supplier_rows(supplier.id)
            total_purchases = sum((r['inflow'] for r in rows), ZERO)
            total_debits = sum((r['outflow'] for r in rows), ZERO)
            summary.append({
                'supplier_id': supplier.id,
                'supplier_name': supplier.name,
                'contact': supplier.contact,
                'total_purchases': float(round2(total_purchases)),
                'total_paid': float(round2(total_debits)),
                'balance': float(round2(total_purchases - total_debits)),
            })
        return summary

    # ==================== PROFIT ====================

    def get_profit_report(self, start_date: date = None, end_date: date = None) -> Dict:
        """
        Profit per confirmed (non-archived) query whose tour starts in the
        range, plus expenses and incomes not tied to any query.
        """
        query = self.db.query(TourPackageQuery).options(
            selectinload(TourPackageQuery.sale_details),
            selectinload(TourPackageQuery.purchase_details),
            selectinload(TourPackageQuery.expense_details),
            selectinload(TourPackageQuery.income_details),
            selectinload(TourPackageQuery.receipt_details),
            selectinload(TourPackageQuery.payment_details)
        ).filter(
            TourPackageQuery.is_archived == False,
            TourPackageQuery.tour_starts_from.isnot(None)
        )
        query = _in_range(query, TourPackageQuery.tour_starts_from, start_date, end_date)
        queries = query.order_by(TourPackageQuery.tour_starts_from).all()

        packages = []
        monthly: Dict[str, Dict[str, Decimal]] = {}
        expenses_by_category: Dict[str, Decimal] = {}
        incomes_by_category: Dict[str, Decimal] = {}

        def month_row(day: date) -> Dict:
            return monthly.setdefault(_month(day), {
                'sales': ZERO, 'purchases': ZERO, 'expenses': ZERO, 'incomes': ZERO,
                'profit': ZERO, 'packages': 0,
            })

        def by_category(bucket: Dict[str, Decimal], category, amount) -> None:
            name = category.name if category else "Uncategorized"
            bucket[name] = bucket.get(name, ZERO) + to_decimal(amount)

        totals = {key: ZERO for key in ('sales', 'purchases', 'expenses', 'incomes', 'receipts', 'payments', 'profit')}

        for record in queries:
            sales = sum((to_decimal(s.sale_price) for s in record.sale_details), ZERO)
            purchases = sum((to_decimal(p.price) for p in record.purchase_details), ZERO)
            expenses = sum((to_decimal(e.amount) for e in record.expense_details), ZERO)
            incomes = sum((to_decimal(i.amount) for i in record.income_details), ZERO)
            receipts = sum((to_decimal(r.amount) for r in record.receipt_details), ZERO)
            payments = sum((to_decimal(p.amount) for p in record.payment_details), ZERO)
            profit = sales - (purchases + expenses) + incomes
            margin = profit / sales * 100 if sales > 0 else ZERO

            for key, value in (('sales', sales), ('purchases', purchases), ('expenses', expenses),
                               ('incomes', incomes), ('receipts', receipts), ('payments', payments),
                               ('profit', profit)):
                totals[key] += value

            for expense in record.expense_details:
                by_category(expenses_by_category, expense.expense_category, expense.amount)
            for income in record.income_details:
                by_category(incomes_by_category, income.income_category, income.amount)

            month = month_row(record.tour_starts_from)
            month['sales'] += sales
            month['purchases'] += purchases
            month['expenses'] += expenses
            month['incomes'] += incomes
            month['profit'] += profit
            month['packages'] += 1

            packages.append({
                'id': record.id,
                'tour_package_query_number': record.tour_package_query_number,
                'tour_package_query_name': record.tour_package_query_name,
                'customer_name': record.customer_name,
                'tour_starts_from': record.tour_starts_from.isoformat(),
                'sales': float(round2(sales)),
                'purchases': float(round2(purchases)),
                'expenses': float(round2(expenses)),
                'incomes': float(round2(incomes)),
                'receipts': float(round2(receipts)),
                'payments': float(round2(payments)),
                'profit': float(round2(profit)),
                'margin': float(round2(margin)),
            })

        general_expenses = _in_range(
            self.db.query(ExpenseDetail).filter(ExpenseDetail.tour_package_query_id.is_(None)),
            ExpenseDetail.expense_date, start_date, end_date
        ).all()
        general_incomes = _in_range(
            self.db.query(IncomeDetail).filter(IncomeDetail.tour_package_query_id.is_(None)),
            IncomeDetail.income_date, start_date, end_date
        ).all()
        general_expense_total = sum((to_decimal(e.amount) for e in general_expenses), ZERO)
        general_income_total = sum((to_decimal(i.amount) for i in general_incomes), ZERO)

        for expense in general_expenses:
            by_category(expenses_by_category, expense.expense_category, expense.amount)
            month = month_row(expense.expense_date)
            month['expenses'] += to_decimal(expense.amount)
            month['profit'] -= to_decimal(expense.amount)
        for income in general_incomes:
            by_category(incomes_by_category, income.income_category, income.amount)
            month = month_row(income.income_date)
            month['incomes'] += to_decimal(income.amount)
            month['profit'] += to_decimal(income.amount)

        profitable = sum(1 for package in packages if package['profit'] > 0)
        net_profit = totals['profit'] - general_expense_total + general_income_total

        return {
            'start_date': start_date.isoformat() if start_date else None,
            'end_date': end_date.isoformat() if end_date else None,
            'packages': packages,
            'totals': {key: float(round2(value)) for key, value in totals.items()},
            'general_expenses': float(round2(general_expense_total)),
            'general_incomes': float(round2(general_income_total)),
            'expenses_by_category': {name: float(round2(value)) for name, value in sorted(expenses_by_category.items())},
            'incomes_by_category': {name: float(round2(value)) for name, value in sorted(incomes_by_category.items())},
            'net_profit': float(round2(net_profit)),
            'overall_margin': float(round2(net_profit / totals['sales'] * 100)) if totals['sales'] > 0 else 0.0,
            'package_count': len(packages),
            'profitable_count': profitable,
            'profitable_percentage': float(round2(Decimal(profitable) / len(packages) * 100)) if packages else 0.0,
            'monthly': {
                key: {
                    name: (float(round2(value)) if isinstance(value, Decimal) else value)
                    for name, value in month.items()
                }
                for key, month in sorted(monthly.items())
            },
        }

    # ==================== GST ====================

    def get_gst_report(self, start_date: date = None, end_date: date = None) -> Dict:
        """Output GST on sales net of returns against input GST on purchases net of returns"""
        months: Dict[str, Dict[str, Decimal]] = {}

        def bucket(day: date) -> Dict[str, Decimal]:
            return months.setdefault(_month(day), {
                'sales_gst': ZERO, 'sale_returns_gst': ZERO,
                'purchases_gst': ZERO, 'purchase_returns_gst': ZERO,
                'taxable_sales': ZERO, 'taxable_purchases': ZERO,
            })

        for sale in _in_range(self.db.query(SaleDetail), SaleDetail.sale_date, start_date, end_date).all():
            entry = bucket(sale.sale_date)
            entry['sales_gst'] += to_decimal(sale.gst_amount)
            entry['taxable_sales'] += to_decimal(sale.sale_price)
        for item in _in_range(self.db.query(SaleReturn), SaleReturn.return_date, start_date, end_date).all():
            bucket(item.return_date)['sale_returns_gst'] += to_decimal(item.gst_amount)
        for purchase in _in_range(self.db.query(PurchaseDetail), PurchaseDetail.purchase_date,
                                  start_date, end_date).all():
            entry = bucket(purchase.purchase_date)
            entry['purchases_gst'] += to_decimal(purchase.gst_amount)
            entry['taxable_purchases'] += to_decimal(purchase.price)
        for item in _in_range(self.db.query(PurchaseReturn), PurchaseReturn.return_date,
                              start_date, end_date).all():
            bucket(item.return_date)['purchase_returns_gst'] += to_decimal(item.gst_amount)

        monthly = []
        output_total = input_total = ZERO
        for key in sorted(months):
            entry = months[key]
            output_gst = entry['sales_gst'] - entry['sale_returns_gst']
            input_gst = entry['purchases_gst'] - entry['purchase_returns_gst']
            output_total += output_gst
            input_total += input_gst
            monthly.append({
                'month': key,
                'taxable_sales': float(round2(entry['taxable_sales'])),
                'taxable_purchases': float(round2(entry['taxable_purchases'])),
                'sales_gst': float(round2(entry['sales_gst'])),
                'sale_returns_gst': float(round2(entry['sale_returns_gst'])),
                'purchases_gst': float(round2(entry['purchases_gst'])),
                'purchase_returns_gst': float(round2(entry['purchase_returns_gst'])),
                'output_gst': float(round2(output_gst)),
                'input_gst': float(round2(input_gst)),
                'net_payable': float(round2(output_gst - input_gst)),
            })

        return {
            'start_date': start_date.isoformat() if start_date else None,
            'end_date': end_date.isoformat() if end_date else None,
            'output_gst': float(round2(output_total)),
            'input_gst': float(round2(input_total)),
            'net_payable': float(round2(output_total - input_total)),
            'monthly': monthly,
        }
