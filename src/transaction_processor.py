import logging

from amount import Amount, AmountOverflowError
from models import Transaction, TransactionType, ProcessingResult
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to the state it is given, one at a time, in arrival order.

    Business-rule violations are returned as ProcessingResult values rather than
    raised. A rejected transaction leaves the state exactly as it found it: every
    new balance is computed, and checked for overflow, before anything is written.
    Accounts are created only by deposits and withdrawals with a valid amount.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied to the account
            any other member: Rejected, state untouched
        """
        try:
            result = self._dispatch(transaction)
        except AmountOverflowError as e:
            logger.warning(f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id} for client {transaction.client_id}: {e}")
            return ProcessingResult.OVERFLOW

        if not result.is_success:
            logger.warning(f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id} for client {transaction.client_id} rejected: {result.value}")
        return result

    def _dispatch(self, transaction: Transaction) -> ProcessingResult:
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)

    @staticmethod
    def _has_valid_amount(transaction: Transaction) -> bool:
        return transaction.amount is not None and not transaction.amount.is_negative()

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        if not self._has_valid_amount(transaction):
            return ProcessingResult.INVALID_AMOUNT

        account = self._state.get_or_create_account(transaction.client_id)
        available = account.available + transaction.amount
        self._total(available, account.held)

        # Locked accounts still accept deposits.
        account.available = available
        self._state.deposit_history.insert(account.client_id, transaction.transaction_id, transaction.amount)
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        if not self._has_valid_amount(transaction):
            return ProcessingResult.INVALID_AMOUNT

        account = self._state.get_or_create_account(transaction.client_id)

        if account.locked:
            return ProcessingResult.ACCOUNT_FROZEN

        if transaction.amount > account.available:
            return ProcessingResult.INSUFFICIENT_FUNDS

        # Withdrawals cannot be disputed, so nothing is kept once applied.
        account.available = account.available - transaction.amount
        return ProcessingResult.SUCCESS

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        client_id, transaction_id = transaction.client_id, transaction.transaction_id
        amount = self._state.deposit_history.get(client_id, transaction_id)

        if amount is None:
            if (client_id, transaction_id) in self._state.dispute_table:
                return ProcessingResult.ALREADY_DISPUTED
            return ProcessingResult.TRANSACTION_NOT_FOUND

        # The deposit that made this entry also created the account.
        account = self._state.get_or_create_account(client_id)

        # available may go negative if the funds were already withdrawn
        available = account.available - amount
        held = account.held + amount

        account.available, account.held = available, held
        self._state.deposit_history.remove(client_id, transaction_id)
        self._state.dispute_table.insert(client_id, transaction_id, amount)
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        client_id, transaction_id = transaction.client_id, transaction.transaction_id
        amount = self._state.dispute_table.get(client_id, transaction_id)

        if amount is None:
            return ProcessingResult.DISPUTE_NOT_FOUND

        account = self._state.get_or_create_account(client_id)
        held = account.held - amount
        available = account.available + amount

        account.available, account.held = available, held
        self._state.dispute_table.remove(client_id, transaction_id)
        # Back in the history, so it can be disputed again later.
        self._state.deposit_history.insert(client_id, transaction_id, amount)
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        amount = self._state.dispute_table.take(transaction.client_id, transaction.transaction_id)

        if amount is None:
            return ProcessingResult.DISPUTE_NOT_FOUND

        account = self._state.get_or_create_account(transaction.client_id)
        # held never drops below zero: amount was added to it by the dispute
        account.held = account.held - amount
        account.locked = True
        return ProcessingResult.SUCCESS

    @staticmethod
    def _total(available: Amount, held: Amount) -> Amount:
        """Raises AmountOverflowError when the resulting total is not representable."""
        return available + held
