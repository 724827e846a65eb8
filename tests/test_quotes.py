"""
Unit tests for exchange-rate quote storage
"""

from datetime import date

from tinbr.services.collections import COTACOES
from tinbr.services.quotes import store_quote
from tinbr.services.repository import CollectionRepository


def test_store_quote_once_per_date(db):
    first = store_quote(db, date(2025, 3, 14), 5.7321)
    second = store_quote(db, "2025-03-14", 5.80)

    assert first is not None
    assert second is None

    quotes = CollectionRepository(db, COTACOES).list(None)
    assert len(quotes) == 1
    assert quotes[0]["data"] == "2025-03-14"
    assert quotes[0]["valor"] == 5.7321
    assert quotes[0]["criadoEm"]


def test_store_quotes_of_different_dates(db):
    store_quote(db, "2025-03-13", 5.70)
    store_quote(db, "2025-03-14", 5.73)

    assert CollectionRepository(db, COTACOES).count(None) == 2
