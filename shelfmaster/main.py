"""Text-menu front end for ShelfMaster."""
import argparse
import logging
import sys

from shelfmaster.data_structures import Role
from shelfmaster.engine import LibraryEngine
from shelfmaster.notifications import LogNotifier
from shelfmaster.reports import ReportGenerator
from shelfmaster.services import require_role
from shelfmaster.storage import FileStore
from shelfmaster.config import DEFAULT_DATA_DIR

logger = logging.getLogger(__name__)


class LibraryConsole:
    """Numbered menus over a LibraryEngine.

    Input and output functions are injectable so that sessions can be
    scripted.
    """

    def __init__(self, engine, input_func=input, output=print):
        self.engine = engine
        self._input = input_func
        self.out = output

    def ask(self, prompt):
        """Return the stripped answer, or None once input is exhausted."""
        try:
            return self._input(prompt).strip()
        except (EOFError, KeyboardInterrupt):
            self.out("")
            return None

    def _report(self, result, success_message):
        self.out(success_message if result else f"Failed: {result.error}")

    # ---------- Main loop ----------

    def run(self):
        while True:
            self.out("\n========== LIBRARY MENU ==========")
            self.out("1) Admin login")
            self.out("2) Librarian login")
            self.out("3) Circulation desk")
            self.out("0) Exit")
            choice = self.ask("Enter choice: ")
            if choice is None or choice == "0":
                self.out("Goodbye!")
                return
            if choice == "1":
                session = self._login(self.engine.admin_service)
                if session:
                    self.admin_menu(session)
            elif choice == "2":
                session = self._login(self.engine.librarian_service)
                if session:
                    self.librarian_menu(session)
            elif choice == "3":
                self.desk_menu()
            else:
                self.out("Invalid option!")

    def _login(self, account_service):
        name = self.ask("Name: ")
        password = self.ask("Password: ")
        if name is None or password is None:
            return None
        session = account_service.login(name, password)
        if session is None:
            self.out("Invalid credentials.")
        return session

    # ---------- Admin ----------

    def admin_menu(self, session):
        if not require_role(session, [Role.ADMIN]):
            self.out("Admin access required.")
            return
        while True:
            self.out("\n----- ADMIN MENU -----")
            self.out("1) Add book")
            self.out("2) Add CD")
            self.out("3) Add user")
            self.out("4) Unregister user")
            self.out("5) Send overdue reminders")
            self.out("0) Logout")
            choice = self.ask("Enter choice: ")
            if choice is None or choice == "0":
                self.engine.admin_service.logout(session)
                return
            if choice == "1":
                title, author, isbn = self.ask("Title: "), self.ask("Author: "), self.ask("ISBN: ")
                if None not in (title, author, isbn):
                    self._report(self.engine.book_service.add_book(title, author, isbn), "Book added.")
            elif choice == "2":
                title, artist, cd_id = self.ask("Title: "), self.ask("Artist: "), self.ask("CD id: ")
                if None not in (title, artist, cd_id):
                    self._report(self.engine.cd_service.add_cd(title, artist, cd_id), "CD added.")
            elif choice == "3":
                name, email = self.ask("Name: "), self.ask("Email: ")
                if name is not None:
                    self._report(self.engine.user_service.add_user(name, email or None), "User added.")
            elif choice == "4":
                user = self.engine.find_user_by_name(self.ask("User name: "))
                self._report(self.engine.unregister_user(user), "User unregistered.")
            elif choice == "5":
                sent = self.engine.send_overdue_reminders()
                self.out("Reminders sent." if sent else "No overdue items.")
            else:
                self.out("Invalid.")

    # ---------- Librarian ----------

    def librarian_menu(self, session):
        if not require_role(session, [Role.LIBRARIAN, Role.ADMIN]):
            self.out("Librarian access required.")
            return
        while True:
            self.out("\n----- LIBRARIAN MENU -----")
            self.out("1) List overdue items")
            self.out("2) Fines report")
            self.out("3) List users")
            self.out("4) List books and CDs")
            self.out("5) List loans")
            self.out("0) Logout")
            choice = self.ask("Enter choice: ")
            if choice is None or choice == "0":
                self.engine.librarian_service.logout(session)
                return
            if choice == "1":
                loans = self.engine.get_overdue_loans() + self.engine.get_overdue_cd_loans()
                self.out(f"Overdue items: {len(loans)}")
                for loan in loans:
                    self.out(f"  {loan.item.ITEM_TYPE} '{loan.item.title}' - {loan.user.name}, "
                             f"due {loan.due_date}, fine {loan.calculate_fine()}")
            elif choice == "2":
                df = ReportGenerator(self.engine).fines_by_user()
                self.out("No fines outstanding." if df.empty else df.to_string(index=False))
            elif choice == "3":
                self.list_users()
            elif choice == "4":
                self.list_catalog()
            elif choice == "5":
                self.list_loans()
            else:
                self.out("Invalid.")

    def list_users(self):
        users = self.engine.get_all_users()
        self.out(f"Users: {len(users)}")
        for user in users:
            self.out(f"  {user.name} | {user.email or '-'} | fine {user.fine_balance}")

    def list_catalog(self):
        items = self.engine.get_all_books() + self.engine.get_all_cds()
        self.out(f"Items: {len(items)}")
        for item in items:
            status = "Available" if item.available else f"Due {item.due_date}"
            self.out(f"  {item.ITEM_TYPE} {item.item_id}: {item.title} | {item.creator} | {status}")

    def list_loans(self):
        loans = [l for l in self.engine.get_all_loans() + self.engine.get_all_cd_loans() if l.active]
        self.out(f"Active loans: {len(loans)}")
        for loan in loans:
            self.out(f"  {loan.item.ITEM_TYPE} '{loan.item.title}' - {loan.user.name}, due {loan.due_date}")

    # ---------- Circulation desk ----------

    def desk_menu(self):
        while True:
            self.out("\n----- CIRCULATION DESK -----")
            self.out("1) Borrow book")
            self.out("2) Return book")
            self.out("3) Borrow CD")
            self.out("4) Return CD")
            self.out("5) Pay fine")
            self.out("6) Search books")
            self.out("7) Search CDs")
            self.out("0) Back")
            choice = self.ask("Enter choice: ")
            if choice is None or choice == "0":
                return
            if choice in ("1", "2"):
                user = self.engine.find_user_by_name(self.ask("User name: "))
                book = self.engine.find_book_by_isbn(self.ask("ISBN: "))
                if choice == "1":
                    result = self.engine.borrow_book(user, book)
                    self._report(result, f"Borrowed. Due {result.value.due_date}." if result else "")
                else:
                    self._report(self.engine.return_book(user, book), "Returned.")
            elif choice in ("3", "4"):
                user = self.engine.find_user_by_name(self.ask("User name: "))
                cd = self.engine.find_cd_by_id(self.ask("CD id: "))
                if choice == "3":
                    result = self.engine.borrow_cd(user, cd)
                    self._report(result, f"Borrowed. Due {result.value.due_date}." if result else "")
                else:
                    self._report(self.engine.return_cd(user, cd), "Returned.")
            elif choice == "5":
                user = self.engine.find_user_by_name(self.ask("User name: "))
                amount = self.ask("Amount: ")
                try:
                    amount = float(amount)
                except (TypeError, ValueError):
                    self.out("Invalid amount.")
                    continue
                if user is None:
                    self.out("Unknown user.")
                    continue
                result = self.engine.user_service.pay_fine(user, amount)
                self._report(result, f"Remaining balance: {result.value}" if result else "")
            elif choice in ("6", "7"):
                keyword = self.ask("Keyword: ")
                if keyword is None:
                    return
                service = self.engine.book_service if choice == "6" else self.engine.cd_service
                matches = service.search(keyword)
                self.out(f"Found {len(matches)} result(s):")
                for item in matches:
                    status = "Available" if item.available else f"Due {item.due_date}"
                    self.out(f"  {item.item_id}: {item.title} | {item.creator} | {status}")
            else:
                self.out("Invalid.")


def build_parser():
    parser = argparse.ArgumentParser(prog="shelfmaster", description="Library management console")
    parser.add_argument("--data-dir", default=DEFAULT_DATA_DIR, help="directory holding the data files")
    parser.add_argument("--init-admin", nargs=3, metavar=("ID", "NAME", "PASSWORD"),
                        help="create an admin account before starting")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    return parser


def main(argv=None):
    """Entry point for the application."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s: %(message)s")

    engine = LibraryEngine(FileStore(args.data_dir))
    engine.reminder_service.add_channel(LogNotifier())
    engine.load_all()

    if args.init_admin:
        account_id, name, password = args.init_admin
        try:
            result = engine.admin_service.add_account(int(account_id), name, password)
        except ValueError:
            logger.error("Admin id must be a number: %s", account_id)
            return 2
        if not result:
            logger.warning("Admin not created: %s", result.error)

    LibraryConsole(engine).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
