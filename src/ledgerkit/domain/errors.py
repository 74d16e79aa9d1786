"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ParseError(DomainError):
    """Unreadable input: empty file, unsplittable row, malformed snapshot."""


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class UnresolvedReferenceError(DomainError):
    """An account, category or group name could not be resolved."""


class PersistenceError(DomainError):
    """The store refused to commit a unit of work."""


class PolicyError(DomainError):
    """Unsupported or misconfigured reconciliation strategy."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class OperationCancelled(DomainError):
    """A unit of work was cancelled before its commit point."""


def account_not_found(name: str) -> str:
    """Return message for missing account."""
    return f"Account '{name}' not found"


def group_not_found(name: str) -> str:
    """Return message for missing account group."""
    return f"Account group '{name}' not found"


def category_not_found(name: str) -> str:
    """Return message for missing category."""
    return f"Category '{name}' not found"


def duplicate_name(kind: str, name: str) -> str:
    """Return message for a name that is already taken."""
    return f"{kind} with name '{name}' already exists"


def missing_columns(roles: list[str]) -> str:
    """Return message for a header lacking required columns."""
    return f"CSV file missing required columns: {', '.join(roles)}"


def unknown_strategy(value: str, choices: list[str]) -> str:
    """Return message for an unsupported reconciliation strategy."""
    return f"Unknown reconciliation strategy '{value}'. Supported: {', '.join(choices)}"
