"""ShelfMaster: library circulation with flat-file storage."""

__version__ = "1.0.0"
