"""Tests for the LibraryEngine facade, reminders and staff accounts."""
import os
import sys
import tempfile
import unittest
from datetime import date, timedelta
from unittest.mock import MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from shelfmaster.data_structures import Role, Session
from shelfmaster.engine import LibraryEngine
from shelfmaster.notifications import LogNotifier, NotificationChannel, RecordingNotifier
from shelfmaster.result import ErrorType
from shelfmaster.services import AccountService, ReminderService, require_role
from shelfmaster.storage import FileStore

DAY0 = date(2025, 1, 1)


class EngineTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.engine = LibraryEngine(self.temp_dir.name)
        self.engine.load_all()
        self.dina = self.engine.user_service.add_user("Dina", "dina@example.com").value
        self.ali = self.engine.user_service.add_user("Ali").value
        self.book = self.engine.book_service.add_book("Clean Code", "Robert Martin", "ISBN1").value
        self.cd = self.engine.cd_service.add_cd("Kind of Blue", "Miles Davis", "CD1").value

    def tearDown(self):
        self.temp_dir.cleanup()


class TestLibraryEngine(EngineTestCase):

    def test_store_from_path(self):
        self.assertIsInstance(self.engine.store, FileStore)
        self.assertEqual(str(self.engine.store.data_dir), self.temp_dir.name)

    def test_load_all_on_empty_directory(self):
        with tempfile.TemporaryDirectory() as other:
            reports = LibraryEngine(other).load_all()
        self.assertEqual(set(reports), {'users', 'books', 'cds', 'loans', 'cd_loans', 'admins', 'librarians'})
        self.assertTrue(all(not r.records for r in reports.values()))

    def test_find_loan_user(self):
        self.assertIsNone(self.engine.find_loan_user(self.book))
        self.engine.borrow_book(self.dina, self.book, DAY0)
        self.engine.borrow_cd(self.ali, self.cd, DAY0)
        self.assertIs(self.engine.find_loan_user(self.book), self.dina)
        self.assertIs(self.engine.find_loan_user(self.cd), self.ali)

    def test_borrow_persists_catalog_state(self):
        self.engine.borrow_book(self.dina, self.book, DAY0)
        fresh = LibraryEngine(self.temp_dir.name)
        fresh.load_all()
        book = fresh.find_book_by_isbn("ISBN1")
        self.assertFalse(book.available)
        self.assertEqual(fresh.find_loan_user(book).name, "Dina")

    def test_unregister_refused_while_loan_active(self):
        self.engine.borrow_book(self.dina, self.book, DAY0)
        result = self.engine.unregister_user(self.dina)
        self.assertEqual(result.error_type, ErrorType.HAS_OBLIGATIONS)

        self.engine.return_book(self.dina, self.book, DAY0 + timedelta(days=3))
        self.assertTrue(self.engine.unregister_user(self.dina))
        self.assertIsNone(self.engine.find_user_by_name("Dina"))

    def test_unregister_refused_with_fine(self):
        self.engine.borrow_cd(self.dina, self.cd, DAY0)
        self.engine.return_cd(self.dina, self.cd, DAY0 + timedelta(days=9))
        self.assertEqual(self.dina.fine_balance, 40)
        self.assertFalse(self.engine.unregister_user(self.dina))

        self.engine.user_service.pay_fine(self.dina, 40)
        self.assertTrue(self.engine.unregister_user(self.dina))

    def test_unregister_unknown(self):
        self.assertEqual(self.engine.unregister_user(None).error_type, ErrorType.NOT_FOUND)

    def test_total_overdue_items(self):
        self.engine.borrow_book(self.dina, self.book, DAY0)
        self.engine.borrow_cd(self.ali, self.cd, DAY0)
        self.assertEqual(self.engine.total_overdue_items(DAY0 + timedelta(days=8)), 1)
        self.assertEqual(self.engine.total_overdue_items(DAY0 + timedelta(days=29)), 2)


class TestReminders(EngineTestCase):

    def test_no_overdue_sends_nothing(self):
        channel = MagicMock(spec=NotificationChannel)
        self.engine.reminder_service.add_channel(channel)
        self.assertFalse(self.engine.send_overdue_reminders(DAY0))
        channel.notify.assert_not_called()

    def test_each_overdue_loan_notified_on_every_channel(self):
        first, second = RecordingNotifier(), RecordingNotifier()
        self.engine.reminder_service.add_channel(first)
        self.engine.reminder_service.add_channel(second)
        self.engine.borrow_book(self.dina, self.book, DAY0)
        self.engine.borrow_cd(self.dina, self.cd, DAY0)

        self.assertTrue(self.engine.send_overdue_reminders(DAY0 + timedelta(days=30)))
        self.assertEqual(len(first.sent), 2)
        self.assertEqual(first.sent, second.sent)
        self.assertEqual(
            first.messages[0],
            "To Dina: You have 2 overdue item(s). 'Clean Code' was due on 2025-01-29.",
        )

    def test_log_notifier_writes_to_log(self):
        self.engine.reminder_service.add_channel(LogNotifier())
        self.engine.borrow_cd(self.ali, self.cd, DAY0)
        with self.assertLogs('shelfmaster.notifications', level='INFO') as logs:
            self.engine.send_overdue_reminders(DAY0 + timedelta(days=8))
        self.assertIn("Reminder to Ali", logs.output[0])

    def test_channel_registration(self):
        service = ReminderService()
        channel = RecordingNotifier()
        self.assertTrue(service.add_channel(channel))
        self.assertFalse(service.add_channel(channel))
        self.assertFalse(service.add_channel(None))
        self.assertEqual(service.channels, [channel])
        self.assertTrue(service.remove_channel(channel))
        self.assertFalse(service.remove_channel(channel))

    def test_send_with_no_channels_still_reports_overdue(self):
        self.engine.borrow_book(self.dina, self.book, DAY0)
        self.assertTrue(self.engine.send_overdue_reminders(DAY0 + timedelta(days=29)))


class TestAccounts(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.store = FileStore(self.temp_dir.name)
        self.admins = AccountService(self.store, Role.ADMIN)
        self.admins.add_account(1, "root", "secret")

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_login(self):
        session = self.admins.login("root", "secret")
        self.assertEqual(session, Session(Role.ADMIN, 1, "root"))
        self.assertIsNone(self.admins.login("root", "wrong"))
        self.assertIsNone(self.admins.login("nobody", "secret"))

    def test_invalid_accounts_rejected(self):
        self.assertEqual(self.admins.add_account(1, "other", "pw").error_type, ErrorType.DUPLICATE)
        self.assertEqual(self.admins.add_account(2, "", "pw").error_type, ErrorType.VALIDATION)
        self.assertEqual(self.admins.add_account(3, "Smith, John", "pw").error_type, ErrorType.VALIDATION)
        self.assertEqual(self.admins.add_account(4, "smith", "p,w").error_type, ErrorType.VALIDATION)
        self.assertEqual(len(self.admins.get_all_accounts()), 1)

    def test_accounts_survive_reload(self):
        fresh = AccountService(self.store, Role.ADMIN)
        fresh.load_accounts()
        self.assertIsNotNone(fresh.login("root", "secret"))

        librarians = AccountService(self.store, Role.LIBRARIAN)
        librarians.load_accounts()
        self.assertEqual(librarians.get_all_accounts(), [])

    def test_require_role(self):
        admin = self.admins.login("root", "secret")
        librarian = Session(Role.LIBRARIAN, 7, "lib")
        self.assertTrue(require_role(admin, [Role.ADMIN]))
        self.assertFalse(require_role(librarian, [Role.ADMIN]))
        self.assertTrue(require_role(librarian, [Role.LIBRARIAN, Role.ADMIN]))
        self.assertFalse(require_role(None, [Role.ADMIN]))


if __name__ == '__main__':
    unittest.main()
