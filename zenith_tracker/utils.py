# zenith_tracker/utils.py
from zenith_tracker.core.models import Category


def filter_transactions_by_month(transactions, month_str):
    """
    Return only those transactions whose date falls in the given YYYY-MM.
    """
    year, month = map(int, month_str.split('-'))
    return [tx for tx in transactions if tx.date.year == year and tx.date.month == month]


def filter_transactions(transactions, query=None, category=None):
    """
    Case-insensitive search over item and vendor, optionally limited to one
    category. Order is preserved.
    """
    result = list(transactions)
    if query:
        q = query.lower()
        result = [
            tx for tx in result
            if q in tx.item.lower() or q in (tx.vendor or '').lower()
        ]
    if category:
        cat = Category(category)
        result = [tx for tx in result if tx.category is cat]
    return result
