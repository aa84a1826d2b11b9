"""
Report generation module for ShelfMaster.
Builds overdue and fine reports as pandas DataFrames and exports them to CSV.
"""
import logging
from datetime import date

import pandas as pd

from shelfmaster.config import DATE_FORMAT_STORAGE

logger = logging.getLogger(__name__)

OVERDUE_COLUMNS = ["user", "email", "item_type", "item_id", "title", "due_date", "overdue_days", "fine"]


class ReportGenerator:
    def __init__(self, engine):
        self.engine = engine

    def overdue_report(self, as_of=None):
        """One row per overdue loan (books and CDs), most overdue first."""
        as_of = as_of or date.today()
        loans = self.engine.get_overdue_loans(as_of) + self.engine.get_overdue_cd_loans(as_of)
        rows = [
            {
                "user": loan.user.name,
                "email": loan.user.email or "",
                "item_type": loan.item.ITEM_TYPE,
                "item_id": loan.item.item_id,
                "title": loan.item.title,
                "due_date": loan.due_date.strftime(DATE_FORMAT_STORAGE),
                "overdue_days": loan.overdue_days(as_of),
                "fine": loan.calculate_fine(as_of),
            }
            for loan in loans
        ]
        df = pd.DataFrame(rows, columns=OVERDUE_COLUMNS)
        if df.empty:
            return df
        return df.sort_values(by=["overdue_days", "user"], ascending=[False, True]).reset_index(drop=True)

    def fines_by_user(self, as_of=None):
        """
        Accrued fines per user next to the balance they already owe.
        Users with neither are left out.
        """
        overdue = self.overdue_report(as_of)
        accrued = overdue.groupby("user", as_index=False).agg(
            overdue_items=("item_id", "count"),
            accrued_fine=("fine", "sum"),
        )
        balances = pd.DataFrame(
            [{"user": u.name, "balance": u.fine_balance} for u in self.engine.get_all_users()],
            columns=["user", "balance"],
        )
        df = balances.merge(accrued, on="user", how="outer")
        df[["overdue_items", "accrued_fine", "balance"]] = df[["overdue_items", "accrued_fine", "balance"]].fillna(0)
        df["overdue_items"] = df["overdue_items"].astype(int)
        df["total_due"] = df["balance"] + df["accrued_fine"]
        df = df[df["total_due"] > 0]
        return df.sort_values(by="total_due", ascending=False).reset_index(drop=True)

    def export_overdue_csv(self, path, as_of=None):
        df = self.overdue_report(as_of)
        df.to_csv(path, index=False)
        logger.info("Exported %d overdue loan(s) to %s", len(df), path)
        return len(df)
