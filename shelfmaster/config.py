"""Centralized configuration for ShelfMaster.

This module contains the loan periods, fine rates, storage formats and file
names used throughout the codebase.
"""
import os

# =============================================================================
# LOAN PERIODS
# =============================================================================

# Books may be kept for four weeks
BOOK_LOAN_DAYS = 28

# CDs may be kept for one week
CD_LOAN_DAYS = 7

# =============================================================================
# FINE RATES
# =============================================================================

# Fine per overdue day for a book
BOOK_FINE_PER_DAY = 10

# Fine per overdue day for a CD
CD_FINE_PER_DAY = 20

# =============================================================================
# STORAGE
# =============================================================================

# Date format for storage (ISO 8601)
DATE_FORMAT_STORAGE = "%Y-%m-%d"

# Field separator for flat files (no escaping)
FIELD_SEPARATOR = ","

# Placeholder written for a missing value
NULL_LITERAL = "null"

# Default directory holding the data files
DEFAULT_DATA_DIR = os.environ.get("SHELFMASTER_DATA_DIR", "data")

BOOKS_FILE = "books.txt"
CDS_FILE = "cds.txt"
USERS_FILE = "users.txt"
LOANS_FILE = "loans.txt"
CD_LOANS_FILE = "cdloans.txt"
ADMINS_FILE = "admins.txt"
LIBRARIANS_FILE = "librarians.txt"

# =============================================================================
# REMINDERS
# =============================================================================

REMINDER_TEMPLATE = "You have {count} overdue item(s). '{title}' was due on {due_date}."
