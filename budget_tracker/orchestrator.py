"""
Main Orchestrator for Budget Tracker

Wires settings, storage, audit logging and the ledger into one explicit
Ledger instance for the caller to own.

DESIGN DECISION: The app keeps working without remote storage.
If the Google Sheets backend is selected but cannot be configured, the
ledger falls back to the local JSON file and the fallback is logged.
"""

from pathlib import Path
from typing import Optional, Union

from budget_tracker.audit import AuditLogger, configure_logging
from budget_tracker.config import Settings, get_settings
from budget_tracker.ledger import Ledger
from budget_tracker.models.audit import AuditEventBuilder
from budget_tracker.services.export import write_export
from budget_tracker.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
)


def create_storage(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> KeyValueStorageInterface:
    """
    Build the storage backend selected by BUDGET_STORAGE_BACKEND.

    Returns:
        The configured key-value storage
    """
    settings = settings or get_settings()
    ledger_settings = settings.ledger

    if ledger_settings.storage_backend == "memory":
        return InMemoryKeyValueStorage()

    if ledger_settings.storage_backend == "sheets":
        try:
            client = GoogleSheetsClient(settings.google_sheets)
            return GoogleSheetsKeyValueStorage(client)
        except Exception as e:
            # Storage not configured - continue with the local file
            if audit_logger:
                audit_logger.log(AuditEventBuilder.system_error(
                    error_type="sheets_storage_unavailable",
                    error_message=str(e),
                    details={"fallback": str(ledger_settings.data_path)},
                ))

    return JsonFileKeyValueStorage(ledger_settings.data_path)


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorageInterface] = None,
) -> tuple[Ledger, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; the cached global settings if None
        storage: Storage to use instead of the configured backend
                 (handy for tests)

    Returns:
        (ledger, audit_logger)
    """
    settings = settings or get_settings()
    configure_logging(settings.app.effective_log_level)

    audit_logger = AuditLogger()
    if storage is None:
        storage = create_storage(settings, audit_logger)

    ledger = Ledger.load(
        storage,
        key=settings.ledger.storage_key,
        audit_logger=audit_logger,
    )
    return ledger, audit_logger


def export_ledger(
    ledger: Ledger,
    directory: Union[str, Path],
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> Path:
    """
    Write the ledger to BudgetTracker.xlsx (or the configured name).

    Returns:
        Path of the written workbook

    Raises:
        EmptyExportError: If the ledger is empty
    """
    settings = settings or get_settings()

    transactions = ledger.list()
    path = write_export(
        transactions,
        directory,
        settings=settings.export,
        currency_symbol=settings.ledger.currency_symbol,
    )

    if audit_logger:
        audit_logger.log(AuditEventBuilder.export_completed(
            filename=path.name,
            row_count=len(transactions),
        ))
    return path
