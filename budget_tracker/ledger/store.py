"""
Ledger Store

The ledger is the single owner of the transaction list. It is an explicit
object: whoever builds it (the Streamlit session, a script, a test) holds
the reference and calls its methods. There is no module-level ledger.

Every mutation is written through to storage before the method returns:

    add / remove / clear
        -> mutate the in-memory list
        -> serialize the full list
        -> storage.set(key, blob)

DESIGN DECISION: If the write is rejected, the in-memory change is rolled
back and PersistenceWriteError is raised to the caller. The ledger the
user sees is therefore always the ledger that is stored; a failed save is
visible, never silently lost on the next restart.

DESIGN DECISION: Loading never fails. A missing, unreadable or corrupt
stored ledger starts an empty ledger (logged as a warning). The corrupt
value is left in place until the next mutation overwrites it.

An unreadable medium is not the same as a corrupt value: the stored
ledger may be intact. After a failed read the ledger reads again before
its first write, and refuses to write (PersistenceWriteError) while the
stored value still can't be read.
"""

import time
from decimal import Decimal
from typing import Any, Callable, Iterable, Iterator, Optional

from budget_tracker.audit import AuditLogger
from budget_tracker.ledger.serialization import (
    DeserializationError,
    deserialize_transactions,
    serialize_transactions,
)
from budget_tracker.models.audit import AuditEvent, AuditEventBuilder
from budget_tracker.models.transaction import LedgerSummary, Transaction
from budget_tracker.services.storage import (
    KeyValueStorageInterface,
    PersistenceWriteError,
    StorageError,
)
from budget_tracker.validation import InvalidInputError, validate_transaction_input


DEFAULT_STORAGE_KEY = "budget_transactions_v1"


class TransactionIdGenerator:
    """
    Issues transaction ids from the wall clock in milliseconds.

    Ids never repeat and never go backwards: if the clock hasn't moved
    past the last issued (or observed) id, the next id is last + 1.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = -1

    def observe(self, existing_id: int) -> None:
        """Make sure future ids are greater than an id already in use."""
        self._last = max(self._last, existing_id)

    def next_id(self) -> int:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate


class Ledger:
    """
    Ordered list of transactions with write-through persistence.

    Insertion order is display order. Ids are unique.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: str = DEFAULT_STORAGE_KEY,
        transactions: Iterable[Transaction] = (),
        audit_logger: Optional[AuditLogger] = None,
        id_generator: Optional[TransactionIdGenerator] = None,
    ):
        """
        Initialize a ledger over already-loaded transactions.

        Most callers want Ledger.load() instead.

        Raises:
            ValueError: If two transactions share an id
        """
        self._storage = storage
        self._key = key
        self._transactions: list[Transaction] = list(transactions)
        self._audit_logger = audit_logger
        self._ids = id_generator or TransactionIdGenerator()
        self._storage_unread = False

        seen = set()
        for tx in self._transactions:
            if tx.id in seen:
                raise ValueError(f"Duplicate transaction id {tx.id}")
            seen.add(tx.id)
            self._ids.observe(tx.id)

    @classmethod
    def load(
        cls,
        storage: KeyValueStorageInterface,
        key: str = DEFAULT_STORAGE_KEY,
        audit_logger: Optional[AuditLogger] = None,
        id_generator: Optional[TransactionIdGenerator] = None,
    ) -> 'Ledger':
        """
        Build a ledger from whatever is stored under the key.

        Absent, unreadable or malformed values give an empty ledger.
        Never raises.
        """
        transactions: list[Transaction] = []
        failure: Optional[str] = None
        unread = False

        try:
            transactions = cls._read_stored(storage, key)
        except StorageError as e:
            failure = f"Storage read failed: {e}"
            unread = True
        except DeserializationError as e:
            failure = str(e)

        ledger = cls(
            storage,
            key=key,
            transactions=transactions,
            audit_logger=audit_logger,
            id_generator=id_generator,
        )
        ledger._storage_unread = unread

        if failure is not None:
            ledger._audit(AuditEventBuilder.ledger_recovered(
                storage_key=key,
                reason=failure,
            ))
        else:
            ledger._audit(AuditEventBuilder.ledger_loaded(
                storage_key=key,
                transaction_count=len(transactions),
            ))

        return ledger

    @staticmethod
    def _read_stored(storage: KeyValueStorageInterface, key: str) -> list[Transaction]:
        """
        Read and decode the stored ledger. An absent value is empty.

        Raises:
            StorageError: If the medium can't be read
            DeserializationError: If the stored value is corrupt
        """
        blob = storage.get(key)
        if blob is None:
            return []
        return deserialize_transactions(blob)

    @property
    def key(self) -> str:
        return self._key

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _reload_if_unread(self, operation: str) -> None:
        """
        Retry the read that failed at load time, before the first write.

        Raises:
            PersistenceWriteError: If the stored ledger still can't be read
                (nothing is written, the ledger is unchanged)
        """
        if not self._storage_unread:
            return

        try:
            transactions = self._read_stored(self._storage, self._key)
        except StorageError as e:
            self._audit(AuditEventBuilder.save_failed(
                operation=operation,
                error_message=str(e),
            ))
            raise PersistenceWriteError(
                f"Stored ledger can't be read, refusing to overwrite it: {e}"
            ) from e
        except DeserializationError as e:
            # Readable but corrupt: safe to overwrite
            transactions = []
            self._audit(AuditEventBuilder.ledger_recovered(
                storage_key=self._key,
                reason=str(e),
            ))
        else:
            self._audit(AuditEventBuilder.ledger_loaded(
                storage_key=self._key,
                transaction_count=len(transactions),
            ))

        self._storage_unread = False
        self._transactions = transactions
        for tx in transactions:
            self._ids.observe(tx.id)

    def _persist(self, operation: str, previous: list[Transaction]) -> None:
        """Write the full ledger; restore `previous` if the write fails."""
        try:
            self._storage.set(self._key, serialize_transactions(self._transactions))
        except StorageError as e:
            self._transactions = previous
            self._audit(AuditEventBuilder.save_failed(
                operation=operation,
                error_message=str(e),
            ))
            if isinstance(e, PersistenceWriteError):
                raise
            raise PersistenceWriteError(str(e)) from e

    def add(self, description: Any, amount: Any) -> Transaction:
        """
        Append a new transaction and persist.

        Args:
            description: Non-blank text; surrounding whitespace is trimmed
            amount: Finite number (int, float, Decimal or numeric string)

        Returns:
            The stored Transaction

        Raises:
            InvalidInputError: If either field is invalid (ledger unchanged)
            PersistenceWriteError: If storage rejects the write (ledger unchanged)
        """
        try:
            text, parsed = validate_transaction_input(description, amount)
        except InvalidInputError as e:
            self._audit(AuditEventBuilder.input_rejected(
                fields=list(e.fields),
                error_message=str(e),
            ))
            raise

        self._reload_if_unread("add")
        tx = Transaction(id=self._ids.next_id(), description=text, amount=parsed)

        previous = list(self._transactions)
        self._transactions.append(tx)
        self._persist("add", previous)

        self._audit(AuditEventBuilder.transaction_added(
            transaction_id=tx.id,
            amount=str(tx.amount),
        ))
        return tx

    def remove(self, transaction_id: int) -> bool:
        """
        Remove the transaction with this id, if there is one.

        Returns:
            True if a transaction was removed. A missing id is a no-op
            (nothing is written) and returns False.
        """
        self._reload_if_unread("remove")
        remaining = [tx for tx in self._transactions if tx.id != transaction_id]
        if len(remaining) == len(self._transactions):
            return False

        previous = self._transactions
        self._transactions = remaining
        self._persist("remove", previous)

        self._audit(AuditEventBuilder.transaction_removed(
            transaction_id=transaction_id,
        ))
        return True

    def clear(self) -> None:
        """
        Remove every transaction and persist. Safe to call on an empty ledger.

        Asking the user to confirm is up to the caller.
        """
        self._reload_if_unread("clear")
        previous = self._transactions
        self._transactions = []
        self._persist("clear", previous)

        self._audit(AuditEventBuilder.ledger_cleared(
            removed_count=len(previous),
        ))

    def get(self, transaction_id: int) -> Optional[Transaction]:
        """Find a transaction by id."""
        for tx in self._transactions:
            if tx.id == transaction_id:
                return tx
        return None

    def aggregates(self) -> LedgerSummary:
        """Balance, income and expense over the current transactions."""
        return LedgerSummary.from_transactions(self._transactions)

    @property
    def balance(self) -> Decimal:
        return self.aggregates().balance

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(list(self._transactions))

    # Kept last: the method name shadows the builtin inside the class body
    def list(self) -> list[Transaction]:
        """Snapshot of all transactions in insertion order."""
        return list(self._transactions)
