"""Tests for Loan/CDLoan objects and the User ledger rules."""
import os
import sys
import unittest
from datetime import date, timedelta

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from shelfmaster.data_structures import Book, CD, CDLoan, Loan, User
from shelfmaster.exceptions import ItemUnavailableError, OverdueItemHeldError, UnpaidFineError
from shelfmaster.fines import FineKind

DAY0 = date(2025, 3, 1)


class TestLoan(unittest.TestCase):

    def setUp(self):
        self.user = User("Dina", "dina@example.com")
        self.book = Book("Clean Code", "Robert Martin", "ISBN-1")

    def test_loan_borrows_book(self):
        loan = Loan(self.user, self.book, DAY0)
        self.assertTrue(loan.active)
        self.assertFalse(self.book.available)
        self.assertEqual(loan.due_date, DAY0 + timedelta(days=28))
        self.assertIs(loan.book, self.book)
        self.assertEqual(loan.fine_kind, FineKind.BOOK)

    def test_loan_requires_available_book(self):
        self.book.borrow(DAY0)
        with self.assertRaises(ItemUnavailableError):
            Loan(self.user, self.book, DAY0)

    def test_overdue_days_and_fine(self):
        loan = Loan(self.user, self.book, DAY0)
        self.assertEqual(loan.overdue_days(DAY0 + timedelta(days=28)), 0)
        self.assertEqual(loan.calculate_fine(DAY0 + timedelta(days=28)), 0)
        self.assertEqual(loan.overdue_days(DAY0 + timedelta(days=31)), 3)
        self.assertEqual(loan.calculate_fine(DAY0 + timedelta(days=31)), 30)

    def test_return_only_once(self):
        loan = Loan(self.user, self.book, DAY0)
        self.assertTrue(loan.return_item())
        self.assertFalse(loan.active)
        self.assertTrue(self.book.available)

        # Re-lend the book; the old loan must not release it again
        other = Loan(User("Ali"), self.book, DAY0)
        self.assertFalse(loan.return_item())
        self.assertFalse(self.book.available)
        self.assertTrue(other.active)

    def test_returned_loan_is_never_overdue(self):
        loan = Loan(self.user, self.book, DAY0)
        loan.return_item()
        self.assertFalse(loan.is_overdue(DAY0 + timedelta(days=100)))
        self.assertEqual(loan.calculate_fine(DAY0 + timedelta(days=100)), 0)

    def test_restore_keeps_persisted_dates(self):
        due = DAY0 + timedelta(days=3)
        loan = Loan.restore(self.user, self.book, DAY0, due, active=True)
        self.assertEqual(loan.due_date, due)
        self.assertFalse(self.book.available)
        self.assertEqual(self.book.due_date, due)

    def test_restore_inactive_leaves_item_alone(self):
        loan = Loan.restore(self.user, self.book, DAY0, DAY0 + timedelta(days=28), active=False)
        self.assertFalse(loan.active)
        self.assertTrue(self.book.available)


class TestCDLoan(unittest.TestCase):

    def setUp(self):
        self.user = User("Sara")
        self.cd = CD("Kind of Blue", "Miles Davis", "CD-1")

    def test_cd_loan_scenario(self):
        """CD borrowed on day 0 is due day 7; on day 10 it is 3 days late and owes 60."""
        loan = CDLoan(self.user, self.cd, DAY0)
        self.assertEqual(loan.due_date, DAY0 + timedelta(days=7))
        day10 = DAY0 + timedelta(days=10)
        self.assertTrue(loan.is_overdue(day10))
        self.assertEqual(loan.overdue_days(day10), 3)
        self.assertEqual(loan.calculate_fine(day10), 60)

    def test_fine_zero_when_not_overdue(self):
        loan = CDLoan(self.user, self.cd, DAY0)
        self.assertEqual(loan.calculate_fine(DAY0 + timedelta(days=7)), 0)

    def test_unavailable_cd_raises_same_error(self):
        self.cd.borrow(DAY0)
        with self.assertRaises(ItemUnavailableError):
            CDLoan(self.user, self.cd, DAY0)

    def test_inactive_cd_loan_not_overdue(self):
        loan = CDLoan(self.user, self.cd, DAY0)
        loan.return_item()
        self.assertTrue(self.cd.available)
        self.assertFalse(loan.is_overdue(DAY0 + timedelta(days=30)))


class TestUserLedger(unittest.TestCase):

    def setUp(self):
        self.user = User("Dina", "dina@example.com")
        self.book1 = Book("Java 101", "Author A", "ISBN001")
        self.book2 = Book("Python 101", "Author B", "ISBN002")
        self.cd = CD("Blue Train", "John Coltrane", "CD-9")

    def test_name_equality_ignores_case(self):
        self.assertEqual(User("dina"), self.user)
        self.assertEqual(hash(User("DINA")), hash(self.user))
        self.assertNotEqual(User("Ali"), self.user)

    def test_borrow_and_return_book(self):
        loan = self.user.borrow_book(self.book1, DAY0)
        self.assertEqual(self.user.active_loans, [loan])
        self.assertEqual(self.user.held_items, [self.book1])

        returned = self.user.return_book(self.book1)
        self.assertIs(returned, loan)
        self.assertEqual(self.user.active_loans, [])
        self.assertTrue(self.book1.available)

    def test_return_unknown_book_is_noop(self):
        self.assertIsNone(self.user.return_book(self.book2))

    def test_unpaid_fine_blocks_borrowing(self):
        self.user.fine_balance = 50
        with self.assertRaises(UnpaidFineError):
            self.user.borrow_book(self.book1, DAY0)
        self.assertEqual(self.user.active_loans, [])
        self.assertTrue(self.book1.available)
        self.assertFalse(self.user.can_borrow(DAY0))

    def test_overdue_book_blocks_borrowing_even_without_fine(self):
        self.user.borrow_book(self.book1, DAY0)
        later = DAY0 + timedelta(days=30)
        self.assertEqual(self.user.fine_balance, 0)
        with self.assertRaises(OverdueItemHeldError) as context:
            self.user.borrow_book(self.book2, later)
        self.assertEqual(context.exception.details['overdue_count'], 1)
        self.assertTrue(self.book2.available)

    def test_eligibility_checked_as_of_borrow_date(self):
        self.user.borrow_book(self.book1, DAY0)
        # Book1 is due on day 28; a loan dated day 20 sees nothing overdue
        loan = self.user.borrow_book(self.book2, DAY0 + timedelta(days=20))
        self.assertEqual(loan.borrow_date, DAY0 + timedelta(days=20))
        with self.assertRaises(OverdueItemHeldError):
            self.user.borrow_cd(self.cd, DAY0 + timedelta(days=29))

    def test_overdue_cd_blocks_book_borrowing(self):
        self.user.borrow_cd(self.cd, DAY0)
        with self.assertRaises(OverdueItemHeldError):
            self.user.borrow_book(self.book1, DAY0 + timedelta(days=8))

    def test_overdue_count_mixes_books_and_cds(self):
        self.user.borrow_book(self.book1, DAY0)
        self.user.borrow_cd(self.cd, DAY0)
        self.assertEqual(self.user.overdue_count(DAY0 + timedelta(days=10)), 1)
        self.assertEqual(self.user.overdue_count(DAY0 + timedelta(days=30)), 2)

    def test_pay_fine(self):
        self.user.fine_balance = 50
        self.user.pay_fine(20)
        self.assertEqual(self.user.fine_balance, 30)
        self.user.pay_fine(100)
        self.assertEqual(self.user.fine_balance, 0)
        with self.assertRaises(ValueError):
            self.user.pay_fine(-1)

    def test_charge_fine(self):
        self.user.charge_fine(30)
        self.assertEqual(self.user.fine_balance, 30)
        with self.assertRaises(ValueError):
            self.user.charge_fine(-5)

    def test_can_be_unregistered(self):
        self.assertTrue(self.user.can_be_unregistered())

        self.user.borrow_book(self.book1, DAY0)
        self.assertFalse(self.user.can_be_unregistered())

        self.user.return_book(self.book1)
        self.user.fine_balance = 10
        self.assertFalse(self.user.can_be_unregistered())

        self.user.pay_fine(10)
        self.assertTrue(self.user.can_be_unregistered())

    def test_attach_loan_skips_rules(self):
        self.user.fine_balance = 99
        loan = Loan.restore(self.user, self.book1, DAY0, DAY0 + timedelta(days=28))
        self.user.attach_loan(loan)
        self.user.attach_loan(loan)
        self.assertEqual(self.user.active_loans, [loan])


if __name__ == '__main__':
    unittest.main()
