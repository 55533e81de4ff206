"""
Banking Error Hierarchy

All errors are recoverable user-facing conditions. The session surfaces
them as alerts and returns control to the enclosing menu.
"""


class BankError(Exception):
    """Base class for all Pocket Bank errors"""


class LoginTakenError(BankError):
    """Raised when signing up with a login that already exists"""

    def __init__(self, login: str):
        super().__init__("Account with this login already exists.")
        self.login = login


class AccountNotFoundError(BankError):
    """Raised when no account has the given login"""

    def __init__(self, login: str):
        super().__init__("Sorry, but there is no account with such login.")
        self.login = login


class WrongPasswordError(BankError):
    """Raised when the password does not match the account"""

    def __init__(self, login: str):
        super().__init__("Wrong password.")
        self.login = login


class InvalidAmountError(BankError):
    """Raised when an amount is not a finite positive number"""

    def __init__(self, raw):
        super().__init__(f"Invalid amount: {raw!r}")
        self.raw = raw


class NothingToTransferError(BankError):
    """Raised when the source account has no positive balance"""

    def __init__(self):
        super().__init__("You have no funds to transfer.")


class InsufficientFundsError(BankError):
    """Raised when the transfer amount exceeds the source balance"""

    def __init__(self, balance, amount):
        super().__init__(f"Insufficient funds: balance {balance}, requested {amount}")
        self.balance = balance
        self.amount = amount


class DestinationNotFoundError(BankError):
    """Raised when no account has the destination account number"""

    def __init__(self, account_number: str):
        super().__init__(f"There is no account with number {account_number}.")
        self.account_number = account_number


class StoreFullError(BankError):
    """Raised when every possible account number is already assigned"""

    def __init__(self, capacity: int):
        super().__init__(f"No free account numbers left (all {capacity} in use).")
        self.capacity = capacity
