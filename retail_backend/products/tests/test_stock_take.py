from decimal import Decimal

from django.test import TestCase

from accounting.models import Account, JournalEntry
from accounting.tests.utils import ACTOR, balance_of, make_product, make_store, seed_chart
from audit.models import AuditLog
from products.models import Product, StockTake
from products.services.stock_take_service import (
    StockTakeError,
    cancel_stock_take,
    finalize_stock_take,
    get_active_stock_take,
    start_stock_take,
    update_stock_take_count,
)


class StockTakeTests(TestCase):
    """
    GUARANTEES:
    - At most one active session per store
    - Finalizing posts ONE consolidated journal entry
    - Uncounted items are left alone
    """

    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)
        self.a = make_product(self.store, sku="A", name="Apple", cost="1.00", stock=10)
        self.b = make_product(self.store, sku="B", name="Banana", cost="1.00", stock=10)
        self.c = make_product(self.store, sku="C", name="Cherry", cost="1.00", stock=10)
        self.d = make_product(self.store, sku="D", name="Date", cost="1.00", stock=10)

    def _item(self, session, product):
        return session.items.get(product=product)

    def test_start_snapshots_expected_stock(self):
        session = start_stock_take(store=self.store, actor=ACTOR)

        self.assertEqual(session.items.count(), 4)
        item = self._item(session, self.a)
        self.assertEqual((item.name, item.sku, item.expected), ("Apple", "A", 10))
        self.assertIsNone(item.counted)
        self.assertEqual(get_active_stock_take(self.store), session)

    def test_only_one_active_session(self):
        start_stock_take(store=self.store, actor=ACTOR)
        with self.assertRaises(StockTakeError):
            start_stock_take(store=self.store, actor=ACTOR)
        self.assertEqual(StockTake.objects.filter(store=self.store).count(), 1)

    def test_finalize_posts_one_consolidated_entry(self):
        session = start_stock_take(store=self.store, actor=ACTOR)
        update_stock_take_count(store=self.store, item_id=self._item(session, self.a).pk, counted=20)
        update_stock_take_count(store=self.store, item_id=self._item(session, self.b).pk, counted=6)
        update_stock_take_count(store=self.store, item_id=self._item(session, self.c).pk, counted=11)
        update_stock_take_count(store=self.store, item_id=self._item(session, self.d).pk, counted=10)

        result = finalize_stock_take(store=self.store, actor=ACTOR)

        self.assertEqual(result.adjusted_items, 3)
        self.assertEqual(result.total_adjustment_cost, Decimal("7.00"))
        self.assertEqual(JournalEntry.objects.filter(store=self.store).count(), 1)
        self.assertEqual(balance_of(self.accounts[Account.INVENTORY]), Decimal("7.00"))
        self.assertEqual(
            [Product.objects.get(pk=p.pk).stock for p in (self.a, self.b, self.c, self.d)],
            [20, 6, 11, 10],
        )

        session.refresh_from_db()
        self.assertEqual(session.status, StockTake.STATUS_COMPLETED)
        self.assertIsNotNone(session.end_time)
        self.assertIsNone(get_active_stock_take(self.store))
        self.assertEqual(
            AuditLog.objects.get(action="Stock Take Finalized").details,
            "Finalized stock take. 3 products adjusted. Total value change: 7.00.",
        )

    def test_uncounted_items_are_skipped(self):
        session = start_stock_take(store=self.store, actor=ACTOR)
        update_stock_take_count(store=self.store, item_id=self._item(session, self.a).pk, counted=8)

        result = finalize_stock_take(store=self.store, actor=ACTOR)

        self.assertEqual(result.adjusted_items, 1)
        self.assertEqual(Product.objects.get(pk=self.b.pk).stock, 10)
        self.assertEqual(balance_of(self.accounts[Account.INVENTORY]), Decimal("-2.00"))

    def test_no_differences_posts_nothing(self):
        start_stock_take(store=self.store, actor=ACTOR)
        result = finalize_stock_take(store=self.store, actor=ACTOR)

        self.assertIsNone(result.journal_entry)
        self.assertFalse(JournalEntry.objects.exists())

    def test_negative_count_rejected(self):
        session = start_stock_take(store=self.store, actor=ACTOR)
        with self.assertRaises(StockTakeError):
            update_stock_take_count(store=self.store, item_id=self._item(session, self.a).pk, counted=-1)

    def test_count_without_session(self):
        with self.assertRaises(StockTakeError):
            update_stock_take_count(store=self.store, item_id=self.a.pk, counted=1)

    def test_cancel_discards_session(self):
        session = start_stock_take(store=self.store, actor=ACTOR)
        update_stock_take_count(store=self.store, item_id=self._item(session, self.a).pk, counted=0)

        cancel_stock_take(store=self.store, actor=ACTOR)

        self.assertFalse(StockTake.objects.exists())
        self.assertEqual(Product.objects.get(pk=self.a.pk).stock, 10)
        start_stock_take(store=self.store, actor=ACTOR)

    def test_sessions_are_per_store(self):
        other = make_store("Other")
        start_stock_take(store=self.store, actor=ACTOR)
        start_stock_take(store=other, actor=ACTOR)
        self.assertEqual(StockTake.objects.filter(status=StockTake.STATUS_ACTIVE).count(), 2)
