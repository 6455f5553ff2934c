"""Tests for the ledger store."""

import json
import random

import pytest
from decimal import Decimal

from budget_tracker.ledger import DEFAULT_STORAGE_KEY, Ledger, TransactionIdGenerator
from budget_tracker.models.transaction import Transaction
from budget_tracker.services.storage import InMemoryKeyValueStorage, PersistenceWriteError
from budget_tracker.validation import InvalidInputError
from tests.helpers import (
    FixedClock,
    FlakyStorage,
    RejectingStorage,
    UnreadableStorage,
    logged_event_types,
)


def reload(storage, key=DEFAULT_STORAGE_KEY) -> Ledger:
    """Simulate a process restart over the same storage."""
    return Ledger.load(storage, key=key)


class TestTransactionIdGenerator:
    """Tests for id generation."""

    def test_ids_come_from_the_clock_in_milliseconds(self):
        """Test ids are millisecond timestamps when the clock moves."""
        clock = FixedClock(1_700_000_000.0)
        ids = TransactionIdGenerator(clock)
        assert ids.next_id() == 1_700_000_000_000
        clock.now += 1
        assert ids.next_id() == 1_700_000_001_000

    def test_ids_unique_when_clock_stands_still(self):
        """Test ids keep increasing within the same millisecond."""
        ids = TransactionIdGenerator(FixedClock())
        issued = [ids.next_id() for _ in range(100)]
        assert len(set(issued)) == 100
        assert issued == sorted(issued)

    def test_ids_unique_when_clock_goes_backwards(self):
        """Test a clock jumping back never repeats an id."""
        clock = FixedClock(2_000_000_000.0)
        ids = TransactionIdGenerator(clock)
        first = ids.next_id()
        clock.now = 1_000_000_000.0
        assert ids.next_id() == first + 1

    def test_observe_pushes_ids_past_existing(self):
        """Test observed ids are never reissued."""
        ids = TransactionIdGenerator(FixedClock(1.0))
        ids.observe(5_000_000)
        assert ids.next_id() == 5_000_001


class TestLedgerScenario:
    """The salary/rent walk-through."""

    def test_salary_and_rent(self, salary_and_rent):
        """Test list, aggregates and displays after two adds."""
        ledger = salary_and_rent

        assert [(tx.description, tx.amount) for tx in ledger.list()] == [
            ("salary", Decimal("5000")),
            ("rent", Decimal("-1500")),
        ]

        totals = ledger.aggregates()
        assert totals.balance == Decimal("3500.00")
        assert totals.income == Decimal("5000.00")
        assert totals.expense == Decimal("-1500.00")

        formatted = totals.formatted()
        assert formatted["balance"] == "R3500.00"
        assert formatted["income"] == "R5000.00"
        assert formatted["expense"] == "-R1500.00"

    def test_stored_blob_matches_ledger(self, salary_and_rent, storage):
        """Test every mutation writes the full list under the fixed key."""
        data = json.loads(storage.get("budget_transactions_v1"))
        assert [(r["text"], r["amount"]) for r in data] == [("salary", 5000), ("rent", -1500)]
        assert set(data[0]) == {"id", "text", "amount"}


class TestLedgerLoad:
    """Tests for Ledger.load."""

    def test_load_missing_key_is_empty(self, storage):
        """Test an absent value gives an empty ledger."""
        ledger = Ledger.load(storage)
        assert ledger.list() == []
        assert len(ledger) == 0

    def test_load_existing_ledger(self):
        """Test stored transactions are loaded in order."""
        blob = '[{"id":1,"text":"salary","amount":5000},{"id":2,"text":"rent","amount":-1500}]'
        ledger = Ledger.load(InMemoryKeyValueStorage({DEFAULT_STORAGE_KEY: blob}))
        assert [tx.id for tx in ledger.list()] == [1, 2]
        assert ledger.aggregates().balance == Decimal("3500")

    @pytest.mark.parametrize("blob", [
        "not json",
        '{"transactions": []}',
        '[{"id": 1, "text": "", "amount": 5}]',
        '[{"id": 1, "text": "a", "amount": 5}, {"id": 1, "text": "b", "amount": 6}]',
    ])
    def test_load_recovers_from_corrupt_value(self, blob, audit_logger):
        """Test a corrupt value gives an empty ledger and a warning event."""
        storage = InMemoryKeyValueStorage({DEFAULT_STORAGE_KEY: blob})
        ledger = Ledger.load(storage, audit_logger=audit_logger)
        assert ledger.list() == []
        assert logged_event_types(audit_logger) == ["ledger_recovered"]

    def test_load_does_not_overwrite_corrupt_value(self):
        """Test the corrupt value stays until the next mutation."""
        storage = InMemoryKeyValueStorage({DEFAULT_STORAGE_KEY: "garbage"})
        ledger = Ledger.load(storage)
        assert storage.get(DEFAULT_STORAGE_KEY) == "garbage"

        ledger.add("coffee", -3)
        assert json.loads(storage.get(DEFAULT_STORAGE_KEY))[0]["text"] == "coffee"

    def test_load_recovers_from_read_failure(self, audit_logger):
        """Test an unreadable medium gives an empty ledger."""
        ledger = Ledger.load(UnreadableStorage(), audit_logger=audit_logger)
        assert ledger.list() == []
        assert logged_event_types(audit_logger) == ["ledger_recovered"]

    def test_load_logs_loaded_event(self, storage, audit_logger):
        """Test a normal load is logged."""
        Ledger.load(storage, audit_logger=audit_logger)
        assert logged_event_types(audit_logger) == ["ledger_loaded"]

    def test_custom_storage_key(self, storage):
        """Test ledgers under different keys don't see each other."""
        first = Ledger.load(storage, key="profile_a")
        first.add("salary", 100)

        assert Ledger.load(storage, key="profile_b").list() == []
        assert len(Ledger.load(storage, key="profile_a")) == 1

    def test_constructor_rejects_duplicate_ids(self, storage):
        """Test a ledger can't be built with clashing ids."""
        transactions = [
            Transaction(id=1, description="a", amount=1),
            Transaction(id=1, description="b", amount=2),
        ]
        with pytest.raises(ValueError, match="Duplicate transaction id"):
            Ledger(storage, transactions=transactions)


class TestLedgerAdd:
    """Tests for Ledger.add."""

    def test_add_returns_stored_transaction(self, ledger):
        """Test add returns the appended transaction."""
        tx = ledger.add("  salary ", "5000")
        assert tx.description == "salary"
        assert tx.amount == Decimal("5000")
        assert ledger.list() == [tx]
        assert ledger.get(tx.id) == tx

    @pytest.mark.parametrize("description, amount", [
        ("", 10),
        ("   ", 10),
        ("coffee", float("nan")),
        ("coffee", float("inf")),
        ("coffee", "abc"),
        ("coffee", ""),
        (None, 10),
    ])
    def test_add_rejects_invalid_input(self, salary_and_rent, storage, description, amount):
        """Test invalid input raises and leaves the ledger unchanged."""
        before = salary_and_rent.list()
        writes = storage.write_count

        with pytest.raises(InvalidInputError):
            salary_and_rent.add(description, amount)

        assert salary_and_rent.list() == before
        assert storage.write_count == writes

    def test_add_logs_rejection(self, ledger, audit_logger):
        """Test rejected input is logged."""
        with pytest.raises(InvalidInputError):
            ledger.add("", 10)
        assert logged_event_types(audit_logger)[-1] == "input_rejected"

    def test_zero_amount_allowed(self, ledger):
        """Test zero is neither income nor expense."""
        ledger.add("placeholder", 0)
        totals = ledger.aggregates()
        assert totals.income == 0
        assert totals.expense == 0
        assert len(ledger) == 1

    def test_float_amounts_do_not_drift(self, ledger):
        """Test 0.1 + 0.2 sums to exactly 0.3."""
        ledger.add("a", 0.1)
        ledger.add("b", 0.2)
        assert ledger.aggregates().balance == Decimal("0.3")
        assert ledger.aggregates().formatted()["balance"] == "R0.30"

    @pytest.mark.parametrize("amount", ["0.12345678901234567891", "1e-400"])
    def test_unstorable_precision_rejected(self, salary_and_rent, storage, amount):
        """Test amounts that wouldn't survive a restart unchanged are rejected."""
        before = salary_and_rent.list()

        with pytest.raises(InvalidInputError):
            salary_and_rent.add("precise", amount)

        assert salary_and_rent.list() == before
        assert reload(storage).list() == before

    @pytest.mark.parametrize("amount", ["1234.56", "-0.001", "0.1234567890123", 1e-300])
    def test_amounts_survive_reload(self, ledger, storage, amount):
        """Test stored amounts reload exactly, totals included."""
        ledger.add("item", amount)
        reloaded = reload(storage)
        assert reloaded.list() == ledger.list()
        assert reloaded.aggregates() == ledger.aggregates()

    def test_description_kept_verbatim(self, ledger, storage):
        """Test markup in descriptions is stored as plain text."""
        tx = ledger.add("<img src=x onerror=alert(1)>", -1)
        assert tx.description == "<img src=x onerror=alert(1)>"
        assert reload(storage).list()[0].description == "<img src=x onerror=alert(1)>"

    def test_ids_unique_within_process(self, ledger):
        """Test many adds in the same millisecond get distinct ids."""
        ids = [ledger.add(f"tx {i}", i).id for i in range(50)]
        assert len(set(ids)) == 50
        assert ids == sorted(ids)

    def test_ids_unique_across_reload(self, storage):
        """Test ids issued after a restart don't clash with stored ones."""
        future = TransactionIdGenerator(FixedClock(2_000_000_000.0))
        first = Ledger.load(storage, id_generator=future)
        old = first.add("salary", 100)

        # Restart with a clock that is behind the stored ids
        past = TransactionIdGenerator(FixedClock(1_000_000_000.0))
        second = Ledger.load(storage, id_generator=past)
        new = second.add("rent", -50)

        assert new.id > old.id

    def test_add_logs_event(self, ledger, audit_logger):
        """Test successful adds are logged."""
        tx = ledger.add("salary", 5000)
        event = audit_logger.log.call_args_list[-1].args[0]
        assert event.event_type.value == "transaction_added"
        assert event.entity_id == tx.id


class TestLedgerRemove:
    """Tests for Ledger.remove."""

    def test_remove_existing(self, salary_and_rent, storage):
        """Test removing an existing id."""
        rent = salary_and_rent.list()[1]

        assert salary_and_rent.remove(rent.id) is True
        assert [tx.description for tx in salary_and_rent.list()] == ["salary"]
        assert [tx.description for tx in reload(storage).list()] == ["salary"]

    def test_remove_missing_id(self, salary_and_rent, storage):
        """Test a missing id returns False, changes nothing and writes nothing."""
        before = salary_and_rent.list()
        writes = storage.write_count

        assert salary_and_rent.remove(123456) is False
        assert salary_and_rent.list() == before
        assert storage.write_count == writes

    def test_remove_twice(self, salary_and_rent):
        """Test the second removal of the same id is a no-op."""
        tx_id = salary_and_rent.list()[0].id
        assert salary_and_rent.remove(tx_id) is True
        assert salary_and_rent.remove(tx_id) is False
        assert len(salary_and_rent) == 1

    def test_remove_logs_event(self, salary_and_rent, audit_logger):
        """Test removals are logged, misses are not."""
        salary_and_rent.remove(999)
        salary_and_rent.remove(salary_and_rent.list()[0].id)
        assert logged_event_types(audit_logger)[-1] == "transaction_removed"
        assert logged_event_types(audit_logger).count("transaction_removed") == 1


class TestLedgerClear:
    """Tests for Ledger.clear."""

    def test_clear(self, salary_and_rent, storage):
        """Test clear empties and persists."""
        salary_and_rent.clear()
        assert salary_and_rent.list() == []
        assert reload(storage).list() == []
        assert storage.get(DEFAULT_STORAGE_KEY) == "[]"

    def test_clear_twice(self, salary_and_rent):
        """Test clearing an already empty ledger is fine."""
        salary_and_rent.clear()
        salary_and_rent.clear()
        assert salary_and_rent.list() == []

    def test_clear_logs_removed_count(self, salary_and_rent, audit_logger):
        """Test clears are logged with how much was removed."""
        salary_and_rent.clear()
        event = audit_logger.log.call_args_list[-1].args[0]
        assert event.event_type.value == "ledger_cleared"
        assert event.details["removed_count"] == 2


class TestLedgerWriteFailures:
    """Tests for rejected writes."""

    def test_failed_add_rolls_back(self, salary_and_rent, storage):
        """Test a rejected write raises and leaves the ledger as stored."""
        before = salary_and_rent.list()
        storage.reject_writes = True

        with pytest.raises(PersistenceWriteError):
            salary_and_rent.add("bonus", 100)

        assert salary_and_rent.list() == before
        assert reload(storage).list() == before

    def test_failed_remove_rolls_back(self, salary_and_rent, storage):
        """Test a rejected removal keeps the transaction."""
        before = salary_and_rent.list()
        storage.reject_writes = True

        with pytest.raises(PersistenceWriteError):
            salary_and_rent.remove(before[0].id)

        assert salary_and_rent.list() == before

    def test_failed_clear_rolls_back(self, salary_and_rent, storage):
        """Test a rejected clear keeps everything."""
        before = salary_and_rent.list()
        storage.reject_writes = True

        with pytest.raises(PersistenceWriteError):
            salary_and_rent.clear()

        assert salary_and_rent.list() == before

    def test_failed_write_is_logged(self, salary_and_rent, storage, audit_logger):
        """Test failed saves are logged as save_failed."""
        storage.reject_writes = True
        with pytest.raises(PersistenceWriteError):
            salary_and_rent.add("bonus", 100)
        assert logged_event_types(audit_logger)[-1] == "save_failed"

    def test_ledger_usable_after_failure(self, salary_and_rent, storage):
        """Test the ledger keeps working once the medium recovers."""
        storage.reject_writes = True
        with pytest.raises(PersistenceWriteError):
            salary_and_rent.add("bonus", 100)

        storage.reject_writes = False
        salary_and_rent.add("bonus", 100)
        assert [tx.description for tx in reload(storage).list()] == ["salary", "rent", "bonus"]


class TestLedgerUnreadableStorage:
    """Tests for a ledger whose stored value couldn't be read at load time."""

    @pytest.fixture
    def five_stored(self):
        records = [{"id": i, "text": f"item {i}", "amount": i * 10} for i in range(1, 6)]
        return {DEFAULT_STORAGE_KEY: json.dumps(records)}

    def test_first_write_keeps_stored_ledger(self, five_stored):
        """Test a read failure at load doesn't wipe the stored history."""
        storage = FlakyStorage(five_stored)
        ledger = Ledger.load(storage)
        assert ledger.list() == []

        ledger.add("coffee", -3)

        stored = [r["text"] for r in json.loads(storage.get(DEFAULT_STORAGE_KEY))]
        assert stored == ["item 1", "item 2", "item 3", "item 4", "item 5", "coffee"]
        assert [tx.description for tx in ledger.list()] == stored

    def test_remove_after_read_failure(self, five_stored):
        """Test remove sees the stored transactions once they can be read."""
        storage = FlakyStorage(five_stored)
        ledger = Ledger.load(storage)

        assert ledger.remove(3) is True
        assert [tx.id for tx in reload(storage).list()] == [1, 2, 4, 5]

    @pytest.mark.parametrize("mutate", [
        lambda ledger: ledger.add("coffee", -3),
        lambda ledger: ledger.remove(1),
        lambda ledger: ledger.clear(),
    ])
    def test_write_refused_while_unreadable(self, five_stored, audit_logger, mutate):
        """Test nothing is written while the stored ledger still can't be read."""
        storage = UnreadableStorage(five_stored)
        ledger = Ledger.load(storage, audit_logger=audit_logger)

        with pytest.raises(PersistenceWriteError):
            mutate(ledger)

        assert storage._data == five_stored
        assert ledger.list() == []
        assert logged_event_types(audit_logger)[-1] == "save_failed"

    def test_ids_follow_reloaded_transactions(self):
        """Test new ids stay above ids found by the retried read."""
        blob = json.dumps([{"id": 9_000_000_000_000, "text": "salary", "amount": 100}])
        storage = FlakyStorage({DEFAULT_STORAGE_KEY: blob})
        ledger = Ledger.load(storage, id_generator=TransactionIdGenerator(FixedClock()))

        tx = ledger.add("rent", -50)
        assert tx.id > 9_000_000_000_000

    def test_corrupt_value_on_retry_is_overwritten(self):
        """Test a value that turns out corrupt is replaced as usual."""
        storage = FlakyStorage({DEFAULT_STORAGE_KEY: "garbage"})
        ledger = Ledger.load(storage)

        ledger.add("coffee", -3)
        assert [r["text"] for r in json.loads(storage.get(DEFAULT_STORAGE_KEY))] == ["coffee"]


class TestLedgerProperties:
    """Properties that must hold for any sequence of operations."""

    def test_list_is_a_snapshot(self, salary_and_rent):
        """Test changing a returned list doesn't touch the ledger."""
        snapshot = salary_and_rent.list()
        snapshot.clear()
        assert len(salary_and_rent.list()) == 2

    def test_iteration_is_a_snapshot(self, salary_and_rent):
        """Test removing while iterating is safe."""
        for tx in salary_and_rent:
            salary_and_rent.remove(tx.id)
        assert salary_and_rent.list() == []

    def test_random_operations(self, storage):
        """Test round-trip, balance invariant and id uniqueness over random ops."""
        rng = random.Random(1234)
        ledger = Ledger.load(storage, id_generator=TransactionIdGenerator(FixedClock()))
        seen_ids = set()

        for step in range(300):
            op = rng.random()
            if op < 0.6:
                amount = Decimal(rng.randint(-100000, 100000)) / 100
                tx = ledger.add(f"item {step}", amount)
                assert tx.id not in seen_ids
                seen_ids.add(tx.id)
            elif op < 0.9 and len(ledger):
                ledger.remove(rng.choice(ledger.list()).id)
            elif op < 0.95:
                ledger.remove(-1)
            else:
                ledger.clear()

            totals = ledger.aggregates()
            assert totals.balance == totals.income + totals.expense
            assert totals.balance == sum((tx.amount for tx in ledger.list()), Decimal(0))
            assert reload(storage).list() == ledger.list()
