"""
Balance Engine Module

Validates and applies balance-changing operations: deposits and
transfers between accounts of the same store. Either both sides of a
transfer are applied and persisted, or neither is.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Callable, Optional

from .accounts import Account, AccountStore
from .errors import (
    DestinationNotFoundError, InsufficientFundsError, NothingToTransferError
)
from .logging_config import get_logger, log_action
from .money import AmountInput, parse_positive_amount


@dataclass(frozen=True)
class TransferRequest:
    """A validated transfer waiting for confirmation"""
    source: Account
    destination: Account
    amount: Decimal


ConfirmCallback = Callable[[TransferRequest], bool]


class BalanceEngine:
    """
    Applies deposits and transfers to accounts held by an AccountStore
    """

    def __init__(self, store: AccountStore, amount_precision: int = 2):
        self.store = store
        self.amount_precision = amount_precision
        self.logger = get_logger("pocket_bank.transactions")

    def deposit(self, account: Account, amount: AmountInput) -> Decimal:
        """
        Add funds to an account

        Args:
            account: Account to credit
            amount: Raw amount (string or number), must be positive

        Returns:
            New balance

        Raises:
            InvalidAmountError: If the amount is unparseable, not finite,
                zero or negative
        """
        value = parse_positive_amount(amount, self.amount_precision)

        previous = account.balance
        account.balance = previous + value
        try:
            self.store.persist()
        except Exception:
            account.balance = previous
            raise

        log_action(
            self.logger, "info", "Deposit applied",
            user_id=account.login, action="deposit", resource=account.account_number,
            extra={"amount": str(value), "balance": str(account.balance)}
        )
        return account.balance

    def prepare_transfer(self, source: Account, amount: AmountInput,
                         destination_number: str) -> TransferRequest:
        """
        Validate a transfer without applying it

        Checks run in this order: source has a positive balance, amount is
        valid, amount is covered by the balance, destination exists.

        Raises:
            NothingToTransferError, InvalidAmountError,
            InsufficientFundsError, DestinationNotFoundError
        """
        if source.balance <= Decimal('0'):
            raise NothingToTransferError()

        value = parse_positive_amount(amount, self.amount_precision)

        if source.balance < value:
            raise InsufficientFundsError(source.balance, value)

        matches = self.store.by_account_number(destination_number)
        if not matches:
            raise DestinationNotFoundError(destination_number)

        return TransferRequest(source=source, destination=matches[0], amount=value)

    def transfer(self, source: Account, amount: AmountInput, destination_number: str,
                 confirm: Optional[ConfirmCallback] = None) -> bool:
        """
        Move funds from one account to another

        Args:
            source: Account to debit
            amount: Raw amount (string or number)
            destination_number: Account number of the account to credit
            confirm: Called with the validated request; returning False
                abandons the transfer. Omitted means confirmed.

        Returns:
            True if the transfer was applied, False if it was declined

        Raises:
            NothingToTransferError, InvalidAmountError,
            InsufficientFundsError, DestinationNotFoundError
        """
        request = self.prepare_transfer(source, amount, destination_number)

        if confirm is not None and not confirm(request):
            log_action(
                self.logger, "info", "Transfer declined",
                user_id=source.login, action="transfer", resource=source.account_number
            )
            return False

        self._apply(request)

        log_action(
            self.logger, "info", "Transfer applied",
            user_id=source.login, action="transfer", resource=source.account_number,
            extra={
                "amount": str(request.amount),
                "destination": request.destination.account_number
            }
        )
        return True

    def _apply(self, request: TransferRequest) -> None:
        """Debit and credit together, rolling both back if persisting fails"""
        source, destination = request.source, request.destination
        source_before = source.balance
        destination_before = destination.balance

        source.balance -= request.amount
        destination.balance += request.amount
        try:
            self.store.persist()
        except Exception:
            destination.balance = destination_before
            source.balance = source_before
            self.logger.exception("Transfer rolled back: persist failed")
            raise
