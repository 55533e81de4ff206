"""
Session Flow Module

Composes the menu engine, account store and balance engine into the
interactive application: sign up, sign in, and the signed-in account
menu with transfers and deposits.
"""

from typing import List

from .accounts import Account, AccountStore
from .errors import BankError
from .interaction import InteractionPort
from .logging_config import get_logger, log_action
from .menu import EXIT, MenuOption, repeat_menu
from .money import format_amount
from .transactions import BalanceEngine, TransferRequest

STAY = None


class BankSession:
    """
    One interactive session over an account store
    """

    def __init__(self, store: AccountStore, engine: BalanceEngine, io: InteractionPort):
        self.store = store
        self.engine = engine
        self.io = io
        self.logger = get_logger("pocket_bank.session")

    def run(self) -> None:
        """Show the main menu until the user exits"""
        repeat_menu(self.main_menu, "Welcome to Pocket Bank!\n", self.io)

    def main_menu(self) -> List[MenuOption]:
        return [
            MenuOption("Log into account", self.sign_in),
            MenuOption("Create new account", self.sign_up),
            MenuOption("Reset all data", self.reset),
            MenuOption("Exit", self.exit),
        ]

    def account_menu(self, account: Account) -> List[MenuOption]:
        return [
            MenuOption("Transfer", lambda: self.transfer(account)),
            MenuOption("Deposit", lambda: self.deposit(account)),
            MenuOption("Log out", lambda: self.log_out(account)),
        ]

    def exit(self):
        self.io.alert("See you next time!")
        return EXIT

    def sign_up(self):
        login = self.io.prompt_text("Enter a login you'd like to use to sign into our system:")
        if login is None:
            return STAY
        owner = self.io.prompt_text("Enter your full name:")
        if owner is None:
            return STAY
        password = self.io.prompt_text("Define a password for signing in:")
        if password is None:
            return STAY

        try:
            account = self.store.create_account(login, owner, password)
        except BankError as e:
            self.io.alert(str(e))
            return STAY

        # Shown as a prompt default so the number can be copied
        self.io.prompt_text("Great! Your new account number is:", default=account.account_number)
        return STAY

    def sign_in(self):
        login = self.io.prompt_text("Enter your login:")
        if login is None:
            return STAY
        password = self.io.prompt_text("Enter your password:")
        if password is None:
            return STAY

        try:
            account = self.store.authenticate(login, password)
        except BankError as e:
            self.io.alert(str(e))
            return STAY

        self.manage_account(account)
        return STAY

    def manage_account(self, account: Account) -> None:
        """Show the signed-in account menu until the user logs out"""
        repeat_menu(
            lambda: self.account_menu(account),
            lambda: self.account_intro(account),
            self.io
        )

    def account_intro(self, account: Account) -> str:
        balance = format_amount(account.balance, self.engine.amount_precision)
        return (
            f"Hello, {account.owner}!\n"
            f"Account number: {account.account_number}\n"
            f"Balance: {balance}\n"
        )

    def deposit(self, account: Account):
        raw = self.io.prompt_text("How much would you like to deposit?")
        if raw is None:
            return STAY

        try:
            balance = self.engine.deposit(account, raw)
        except BankError as e:
            self.io.alert(str(e))
            return STAY

        self.io.alert(f"Deposit accepted. Your balance is now {format_amount(balance, self.engine.amount_precision)}.")
        return STAY

    def transfer(self, account: Account):
        raw = self.io.prompt_text("How much would you like to transfer?")
        if raw is None:
            return STAY
        destination = self.io.prompt_text("Enter the destination account number:")
        if destination is None:
            return STAY

        try:
            applied = self.engine.transfer(account, raw, destination.strip(), confirm=self._confirm_transfer)
        except BankError as e:
            self.io.alert(str(e))
            return STAY

        if applied:
            self.io.alert("Transfer completed.")
        else:
            self.io.alert("Transfer cancelled.")
        return STAY

    def _confirm_transfer(self, request: TransferRequest) -> bool:
        amount = format_amount(request.amount, self.engine.amount_precision)
        return self.io.confirm(
            f"Transfer {amount} to account {request.destination.account_number} "
            f"({request.destination.owner})?"
        )

    def log_out(self, account: Account):
        log_action(self.logger, "info", "Signed out", user_id=account.login, action="log_out")
        return EXIT

    def reset(self):
        if not self.io.confirm("This will permanently delete all accounts. Continue?"):
            return STAY
        self.store.reset()
        self.io.alert("All data has been erased.")
        return STAY
