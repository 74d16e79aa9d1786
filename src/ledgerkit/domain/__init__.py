"""Domain layer for ledgerkit."""

# Services are resolved lazily: database.base imports domain.entities, so
# importing the services here would make the two packages import each other.
_SERVICES = {
    "BackupService": "ledgerkit.domain.backup",
    "LedgerService": "ledgerkit.domain.ledger",
    "Reconciler": "ledgerkit.domain.reconcile",
    "StatementImportService": "ledgerkit.domain.csv_import",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
