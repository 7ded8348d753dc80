from django.db import transaction
from django.test import TestCase

from accounting.tests.utils import ACTOR, make_store
from audit.models import AuditLog
from audit.services import log_action


class LogActionTests(TestCase):
    def setUp(self):
        self.store = make_store()

    def test_records_actor_snapshot(self):
        row = log_action(store=self.store, actor=ACTOR, action="Sale Created", details="x")

        self.assertEqual((row.actor_id, row.actor_name), ("1", "Test Cashier"))
        self.assertEqual(row.store, self.store)
        self.assertIsNotNone(row.timestamp)

    def test_system_actor(self):
        row = log_action(store=self.store, actor=None, action="Chart Seeded")
        self.assertEqual((row.actor_id, row.actor_name, row.details), ("", "system", ""))

    def test_rolled_back_with_caller(self):
        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                log_action(store=self.store, actor=ACTOR, action="Sale Created")
                raise RuntimeError("workflow failed")

        self.assertFalse(AuditLog.objects.exists())
