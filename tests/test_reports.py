"""Tests for the pandas-based overdue and fines reports."""
import os
import sys
import tempfile
import unittest
from datetime import date, timedelta

import pandas as pd

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from shelfmaster.engine import LibraryEngine
from shelfmaster.reports import OVERDUE_COLUMNS, ReportGenerator

DAY0 = date(2025, 1, 1)


class TestReportGenerator(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.engine = LibraryEngine(self.temp_dir.name)
        self.engine.load_all()
        users = self.engine.user_service
        self.dina = users.add_user("Dina", "dina@example.com").value
        self.ali = users.add_user("Ali").value
        self.sam = users.add_user("Sam").value
        self.book = self.engine.book_service.add_book("Clean Code", "Robert Martin", "ISBN1").value
        self.cd = self.engine.cd_service.add_cd("Kind of Blue", "Miles Davis", "CD1").value
        self.engine.borrow_book(self.dina, self.book, DAY0)
        self.engine.borrow_cd(self.ali, self.cd, DAY0)
        self.report = ReportGenerator(self.engine)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_empty_when_nothing_overdue(self):
        df = self.report.overdue_report(DAY0)
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), OVERDUE_COLUMNS)

    def test_overdue_rows_most_late_first(self):
        df = self.report.overdue_report(DAY0 + timedelta(days=30))
        self.assertEqual(list(df["user"]), ["Ali", "Dina"])
        self.assertEqual(list(df["overdue_days"]), [23, 2])
        self.assertEqual(list(df["fine"]), [460, 20])
        self.assertEqual(df.loc[1, "email"], "dina@example.com")
        self.assertEqual(df.loc[0, "item_type"], "CD")

    def test_fines_by_user_adds_balance(self):
        self.sam.fine_balance = 15
        df = self.report.fines_by_user(DAY0 + timedelta(days=10))
        self.assertEqual(list(df["user"]), ["Ali", "Sam"])
        ali = df[df["user"] == "Ali"].iloc[0]
        self.assertEqual(ali["overdue_items"], 1)
        self.assertEqual(ali["accrued_fine"], 60)
        self.assertEqual(ali["total_due"], 60)
        sam = df[df["user"] == "Sam"].iloc[0]
        self.assertEqual(sam["overdue_items"], 0)
        self.assertEqual(sam["total_due"], 15)

    def test_fines_by_user_empty(self):
        self.assertTrue(self.report.fines_by_user(DAY0).empty)

    def test_export_csv(self):
        path = os.path.join(self.temp_dir.name, "overdue.csv")
        count = self.report.export_overdue_csv(path, DAY0 + timedelta(days=30))
        self.assertEqual(count, 2)
        df = pd.read_csv(path)
        self.assertEqual(list(df.columns), OVERDUE_COLUMNS)
        self.assertEqual(len(df), 2)


if __name__ == '__main__':
    unittest.main()
