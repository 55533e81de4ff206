"""
Account Store Module

Owns the collection of accounts, enforces login and account number
uniqueness, and persists the whole collection as a single JSON snapshot
after every mutation.
"""

from decimal import Decimal
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Tuple
import json

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .config import BankConfig
from .errors import AccountNotFoundError, LoginTakenError, StoreFullError, WrongPasswordError
from .ids import generate_numeric_id
from .logging_config import get_logger, log_action
from .storage import SnapshotStorage


@dataclass
class Account:
    """
    Bank account owned by a single user
    """
    login: str
    password: str = field(repr=False)
    owner: str
    account_number: str
    balance: Decimal = Decimal('0')

    def to_record(self) -> Dict[str, object]:
        """Convert to a snapshot record (balance stays a Decimal)"""
        return {
            "login": self.login,
            "password": self.password,
            "owner": self.owner,
            "balance": self.balance,
            "accountNumber": self.account_number,
        }


class AccountRecord(BaseModel):
    """Schema of one account inside a persisted snapshot"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    login: str
    password: str
    owner: str
    balance: Decimal
    account_number: str = Field(alias="accountNumber", pattern=r"^[0-9]+$")

    def to_account(self) -> Account:
        return Account(
            login=self.login,
            password=self.password,
            owner=self.owner,
            account_number=self.account_number,
            balance=self.balance,
        )


SNAPSHOT_ADAPTER = TypeAdapter(List[AccountRecord])


def _json_number(amount: Decimal) -> str:
    """Write a Decimal as a JSON number literal with all of its digits"""
    return format(amount, "f")


def _encode_record(record: Dict[str, object]) -> str:
    members = []
    for key, value in record.items():
        if isinstance(value, Decimal):
            text = _json_number(value)
        else:
            text = json.dumps(value)
        members.append(f"{json.dumps(key)}: {text}")
    return "{" + ", ".join(members) + "}"


class CorruptSnapshotError(ValueError):
    """Raised internally when a snapshot cannot be turned into a valid store"""


def decode_snapshot(data: str) -> List[Account]:
    """
    Decode a JSON snapshot into accounts.

    JSON numbers are read straight into Decimal so balances keep every digit.

    Raises:
        CorruptSnapshotError: On invalid JSON, schema mismatch or duplicate
            logins/account numbers
    """
    try:
        raw = json.loads(data, parse_float=Decimal)
    except ValueError as e:
        raise CorruptSnapshotError(str(e)) from e

    try:
        records = SNAPSHOT_ADAPTER.validate_python(raw)
    except ValidationError as e:
        raise CorruptSnapshotError(str(e)) from e

    accounts = [record.to_account() for record in records]

    logins = {account.login for account in accounts}
    numbers = {account.account_number for account in accounts}
    if len(logins) != len(accounts) or len(numbers) != len(accounts):
        raise CorruptSnapshotError("Snapshot contains duplicate logins or account numbers")

    return accounts


def encode_snapshot(accounts) -> str:
    """Encode accounts as a JSON snapshot"""
    return "[" + ", ".join(_encode_record(account.to_record()) for account in accounts) + "]"


class AccountStore:
    """
    Ordered, persisted collection of accounts
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        key: str = "bankAccounts",
        account_number_length: int = 4,
        id_generator: Callable[[int], str] = generate_numeric_id
    ):
        self.storage = storage
        self.key = key
        self.account_number_length = account_number_length
        self._generate_id = id_generator
        self._accounts: List[Account] = []
        self.logger = get_logger("pocket_bank.accounts")

    @classmethod
    def open(cls, storage: SnapshotStorage, config: BankConfig) -> 'AccountStore':
        """Create a store for the configured key and restore its snapshot"""
        store = cls(
            storage,
            key=config.store_key,
            account_number_length=config.account_number_length
        )
        store.restore()
        return store

    @property
    def accounts(self) -> Tuple[Account, ...]:
        """All accounts in insertion order"""
        return tuple(self._accounts)

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(self.accounts)

    def by_login(self, login: str) -> List[Account]:
        """Get all accounts with the given login"""
        return [account for account in self._accounts if account.login == login]

    def by_account_number(self, account_number: str) -> List[Account]:
        """Get all accounts with the given account number"""
        return [account for account in self._accounts if account.account_number == account_number]

    def total_balance(self) -> Decimal:
        """Sum of all balances"""
        return sum((account.balance for account in self._accounts), Decimal('0'))

    def create_account(self, login: str, owner: str, password: str) -> Account:
        """
        Create a new account with a fresh unique account number

        Args:
            login: Login chosen by the user (must be unique)
            owner: Owner's display name
            password: Password for signing in

        Returns:
            Created Account object

        Raises:
            LoginTakenError: If another account already uses the login
            StoreFullError: If no account number is left
        """
        if self.by_login(login):
            log_action(
                self.logger, "info", "Sign-up rejected: login taken",
                user_id=login, action="create_account"
            )
            raise LoginTakenError(login)

        account = Account(
            login=login,
            password=password,
            owner=owner,
            account_number=self._generate_account_number()
        )
        self._accounts.append(account)
        try:
            self.persist()
        except Exception:
            self._accounts.pop()
            raise

        log_action(
            self.logger, "info", "Account created",
            user_id=login, action="create_account", resource=account.account_number
        )
        return account

    def authenticate(self, login: str, password: str) -> Account:
        """
        Find the account for a login and check its password

        Raises:
            AccountNotFoundError: If no account has the login
            WrongPasswordError: If the password does not match exactly
        """
        matches = self.by_login(login)
        if not matches:
            log_action(self.logger, "info", "Sign-in failed: unknown login",
                       user_id=login, action="authenticate")
            raise AccountNotFoundError(login)

        account = matches[0]
        if account.password != password:
            log_action(self.logger, "warning", "Sign-in failed: wrong password",
                       user_id=login, action="authenticate")
            raise WrongPasswordError(login)

        log_action(self.logger, "info", "Signed in",
                   user_id=login, action="authenticate", resource=account.account_number)
        return account

    def persist(self) -> None:
        """Write the entire store as one snapshot"""
        self.storage.save_snapshot(self.key, encode_snapshot(self._accounts))
        self.logger.debug("Persisted %d accounts under %s", len(self._accounts), self.key)

    def restore(self) -> int:
        """
        Replace the in-memory accounts with the persisted snapshot

        A missing or corrupt snapshot yields an empty store.

        Returns:
            Number of accounts loaded
        """
        data = self.storage.load_snapshot(self.key)
        if data is None:
            self._accounts = []
            self.logger.debug("No snapshot under %s, starting empty", self.key)
            return 0

        try:
            self._accounts = decode_snapshot(data)
        except CorruptSnapshotError as e:
            self._accounts = []
            log_action(
                self.logger, "warning", "Corrupt snapshot ignored, starting empty",
                action="restore", resource=self.key, extra={"error": str(e)}
            )
            return 0

        self.logger.debug("Restored %d accounts from %s", len(self._accounts), self.key)
        return len(self._accounts)

    def reset(self) -> None:
        """Empty the store and erase the persisted snapshot"""
        count = len(self._accounts)
        self._accounts = []
        self.storage.delete_snapshot(self.key)
        log_action(
            self.logger, "warning", "Store reset",
            action="reset", resource=self.key, extra={"accounts_removed": count}
        )

    def _generate_account_number(self) -> str:
        """Generate a random account number not used by any account"""
        length = self.account_number_length
        capacity = 10 ** length
        in_use = sum(1 for account in self._accounts if len(account.account_number) == length)
        if in_use >= capacity:
            raise StoreFullError(capacity)

        while True:
            candidate = self._generate_id(length)
            if not self.by_account_number(candidate):
                return candidate
            self.logger.debug("Account number collision, retrying")
