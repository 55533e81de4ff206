"""
Test suite for the account store

Tests account creation, uniqueness of logins and account numbers,
authentication, and persistence round-tripping through snapshots.
"""

import json
import random

import pytest
from decimal import Decimal
from unittest.mock import patch

from pocket_bank.accounts import Account, AccountStore, decode_snapshot, encode_snapshot
from pocket_bank.config import BankConfig
from pocket_bank.errors import (
    AccountNotFoundError, LoginTakenError, StoreFullError, WrongPasswordError
)
from pocket_bank.storage import InMemorySnapshotStorage


def scripted_ids(*values):
    """Id generator returning the given values in order"""
    remaining = list(values)

    def generate(length):
        return remaining.pop(0)

    return generate


class TestAccountStore:
    """Test AccountStore functionality"""

    def setup_method(self):
        """Set up test fixtures"""
        self.storage = InMemorySnapshotStorage()
        self.store = AccountStore(self.storage)

    def test_create_account(self):
        """Test creating an account with default balance"""
        account = self.store.create_account("alice", "Alice Smith", "secret")

        assert account.login == "alice"
        assert account.owner == "Alice Smith"
        assert account.password == "secret"
        assert account.balance == Decimal("0")
        assert len(account.account_number) == 4
        assert account.account_number.isdigit()
        assert self.store.accounts == (account,)

    def test_create_account_persists(self):
        """Creating an account writes a snapshot"""
        account = self.store.create_account("alice", "Alice Smith", "secret")

        records = json.loads(self.storage.load_snapshot("bankAccounts"))
        assert records == [{
            "login": "alice",
            "password": "secret",
            "owner": "Alice Smith",
            "balance": 0,
            "accountNumber": account.account_number,
        }]

    def test_duplicate_login_rejected(self):
        """Creating the same login twice fails the second time"""
        self.store.create_account("alice", "Alice Smith", "secret")

        with pytest.raises(LoginTakenError):
            self.store.create_account("alice", "Another Alice", "other")

        assert len(self.store) == 1

    def test_create_account_rolled_back_when_persist_fails(self):
        """A failed write leaves no half-created account behind"""
        with patch.object(self.storage, "save_snapshot", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                self.store.create_account("alice", "Alice", "pw")

        assert len(self.store) == 0
        assert self.storage.load_snapshot("bankAccounts") is None

        account = self.store.create_account("alice", "Alice", "pw")
        assert self.store.accounts == (account,)

    def test_login_is_case_sensitive(self):
        """Logins differing only by case are distinct"""
        self.store.create_account("alice", "Alice", "pw")
        self.store.create_account("Alice", "Alice", "pw")
        assert len(self.store) == 2

    def test_account_number_collision_retries(self):
        """A colliding account number is regenerated until unique"""
        store = AccountStore(self.storage, id_generator=scripted_ids("1234", "1234", "1234", "0042"))

        first = store.create_account("alice", "Alice", "pw")
        second = store.create_account("bob", "Bob", "pw")

        assert first.account_number == "1234"
        assert second.account_number == "0042"

    def test_uniqueness_over_many_accounts(self):
        """No two accounts share a login or an account number"""
        rng = random.Random(7)
        store = AccountStore(
            self.storage,
            account_number_length=2,
            id_generator=lambda length: "".join(rng.choice("0123456789") for _ in range(length))
        )
        for i in range(100):
            store.create_account(f"user{i}", f"User {i}", "pw")

        numbers = [account.account_number for account in store]
        logins = [account.login for account in store]
        assert len(set(numbers)) == 100
        assert len(set(logins)) == 100

    def test_store_full(self):
        """Exhausting the number space raises instead of looping forever"""
        store = AccountStore(self.storage, account_number_length=1)
        for i in range(10):
            store.create_account(f"user{i}", "User", "pw")

        with pytest.raises(StoreFullError):
            store.create_account("one_too_many", "User", "pw")

    def test_queries(self):
        """Typed queries return matching accounts or an empty list"""
        alice = self.store.create_account("alice", "Alice", "pw")

        assert self.store.by_login("alice") == [alice]
        assert self.store.by_login("nobody") == []
        assert self.store.by_account_number(alice.account_number) == [alice]
        assert self.store.by_account_number("not-a-number") == []

    def test_authenticate(self):
        """Test successful and failed sign-in"""
        alice = self.store.create_account("alice", "Alice", "secret")

        assert self.store.authenticate("alice", "secret") is alice

        with pytest.raises(AccountNotFoundError):
            self.store.authenticate("bob", "secret")

        with pytest.raises(WrongPasswordError):
            self.store.authenticate("alice", "Secret")

    def test_total_balance(self):
        """Total balance sums every account"""
        alice = self.store.create_account("alice", "Alice", "pw")
        bob = self.store.create_account("bob", "Bob", "pw")
        alice.balance = Decimal("10.50")
        bob.balance = Decimal("4.25")

        assert self.store.total_balance() == Decimal("14.75")

    def test_password_not_in_repr(self):
        """Passwords are never displayed"""
        account = self.store.create_account("alice", "Alice", "hunter2")
        assert "hunter2" not in repr(account)


class TestPersistence:
    """Test snapshot persistence and recovery"""

    def setup_method(self):
        self.storage = InMemorySnapshotStorage()
        self.store = AccountStore(self.storage)

    def test_round_trip(self):
        """Restoring a persisted store yields identical accounts"""
        alice = self.store.create_account("alice", "Alice", "pw1")
        bob = self.store.create_account("bob", "Bob", "pw2")
        alice.balance = Decimal("60.00")
        bob.balance = Decimal("40.25")
        self.store.persist()

        restored = AccountStore(self.storage)
        assert restored.restore() == 2
        assert restored.accounts == self.store.accounts

    def test_round_trip_keeps_every_digit(self):
        """Large and high-precision balances survive a snapshot unchanged"""
        alice = self.store.create_account("alice", "Alice", "pw")
        bob = self.store.create_account("bob", "Bob", "pw")
        alice.balance = Decimal("1234567890123456.78")
        bob.balance = Decimal("-0.000000001")
        self.store.persist()

        restored = AccountStore(self.storage)
        restored.restore()
        assert restored.by_login("alice")[0].balance == Decimal("1234567890123456.78")
        assert restored.by_login("bob")[0].balance == Decimal("-0.000000001")

    def test_restore_missing_snapshot(self):
        """No snapshot is a normal initial state"""
        assert self.store.restore() == 0
        assert len(self.store) == 0

    @pytest.mark.parametrize("data", [
        "not json",
        "{}",
        '[{"login": "alice"}]',
        '[{"login": "a", "password": "p", "owner": "o", "balance": "lots", "accountNumber": "1234"}]',
        '[{"login": "a", "password": "p", "owner": "o", "balance": 1, "accountNumber": "12ab"}]',
    ])
    def test_restore_corrupt_snapshot(self, data):
        """A corrupt snapshot degrades to an empty store"""
        self.storage.save_snapshot("bankAccounts", data)
        self.store.create_account("alice", "Alice", "pw")

        assert self.store.restore() == 0
        assert len(self.store) == 0

    def test_restore_rejects_duplicates(self):
        """A snapshot violating uniqueness is treated as corrupt"""
        record = {"login": "a", "password": "p", "owner": "o", "balance": 0, "accountNumber": "1234"}
        self.storage.save_snapshot("bankAccounts", json.dumps([record, dict(record, login="b")]))

        assert self.store.restore() == 0

    def test_decode_fractional_balance(self):
        """Fractional balances keep their exact digits"""
        accounts = decode_snapshot(
            '[{"login": "a", "password": "p", "owner": "o", "balance": 0.1, "accountNumber": "0001"}]'
        )
        assert accounts[0].balance == Decimal("0.1")

    def test_encode_uses_numbers_for_balance(self):
        """Balances are written as JSON numbers"""
        account = Account(login="a", password="p", owner="o", account_number="0001",
                          balance=Decimal("12.50"))
        assert json.loads(encode_snapshot([account]))[0]["balance"] == 12.5

    def test_reset(self):
        """Reset empties the store and deletes the snapshot"""
        self.store.create_account("alice", "Alice", "pw")
        self.store.reset()

        assert len(self.store) == 0
        assert self.storage.load_snapshot("bankAccounts") is None

        self.store.create_account("alice", "Alice", "pw")
        assert len(self.store) == 1

    def test_open_restores_configured_key(self):
        """open() restores from the key named in configuration"""
        config = BankConfig(storage_backend="memory", store_key="otherKey", account_number_length=6)
        first = AccountStore.open(self.storage, config)
        account = first.create_account("alice", "Alice", "pw")

        second = AccountStore.open(self.storage, config)
        assert len(account.account_number) == 6
        assert second.accounts == (account,)
        assert self.storage.load_snapshot("bankAccounts") is None
