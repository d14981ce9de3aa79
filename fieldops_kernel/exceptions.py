"""
Typed Exception Hierarchy for the Field Operations Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the ledger (views, the CLI, import jobs) must react to failures
precisely: re-prompt on a rejected transition, surface a permission message
on a forbidden retirement, report skipped rows after an import. Matching on
message text is fragile, so every failure has:

  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

The lifecycle engine and the ingestion promoters do not raise these for
expected outcomes. They RETURN instances (or ``ValidationError`` values
carrying the same codes) so that no public core operation has an uncaught
exception path. Services raise only for programmer-level misuse such as an
unknown id.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    FieldOpsError (base)
    |
    +-- LedgerError
    |   +-- InvalidTransitionError
    |       +-- ForbiddenTransitionError
    |
    +-- IngestionError
    |   +-- DuplicateKeyError
    |   +-- MalformedRecordError
    |
    +-- EntityNotFoundError
    |   +-- ItemNotFoundError
    |   +-- ClientNotFoundError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                 | When
----------------|----------------------|------------------------------------------
Ledger          | INVALID_TRANSITION   | Action not permitted from current status
                | FORBIDDEN            | Retirement requested without privilege
----------------|----------------------|------------------------------------------
Ingestion       | DUPLICATE_KEY        | Natural key already present (counted skip)
                | MALFORMED_RECORD     | Mandatory field missing (silently dropped)
----------------|----------------------|------------------------------------------
Lookup          | ITEM_NOT_FOUND       | Inventory item id unknown to the store
                | CLIENT_NOT_FOUND     | Client id unknown to the store
----------------|----------------------|------------------------------------------
Configuration   | CONFIGURATION_ERROR  | Unknown or invalid configuration key
===============================================================================
"""


class FieldOpsError(Exception):
    """
    Base exception for all field operations kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "FIELDOPS_ERROR"


# Ledger (lifecycle) exceptions


class LedgerError(FieldOpsError):
    """Base exception for equipment ledger errors."""

    code: str = "LEDGER_ERROR"


class InvalidTransitionError(LedgerError):
    """The requested action is not permitted from the item's current status."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, item_id: str, current_status: str, action: str, detail: str = ""):
        self.item_id = item_id
        self.current_status = current_status
        self.action = action
        message = f"Cannot {action} item {item_id} from status {current_status}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ForbiddenTransitionError(InvalidTransitionError):
    """
    The action requires elevated privilege the actor does not hold.

    Privilege is decided by the caller; the engine only honours the flag.
    """

    code: str = "FORBIDDEN"

    def __init__(self, item_id: str, current_status: str, action: str, actor: str):
        self.actor = actor
        super().__init__(
            item_id,
            current_status,
            action,
            detail=f"actor {actor!r} lacks the required privilege",
        )


# Ingestion exceptions


class IngestionError(FieldOpsError):
    """Base exception for bulk ingestion errors."""

    code: str = "INGESTION_ERROR"


class DuplicateKeyError(IngestionError):
    """A record's natural key collides with an existing record."""

    code: str = "DUPLICATE_KEY"

    def __init__(self, key_name: str, key_value: str, existing_id: str | None = None):
        self.key_name = key_name
        self.key_value = key_value
        self.existing_id = existing_id
        super().__init__(
            f"Duplicate {key_name} {key_value!r}"
            + (f" (existing record {existing_id})" if existing_id else "")
        )


class MalformedRecordError(IngestionError):
    """A record lacks a mandatory field."""

    code: str = "MALFORMED_RECORD"

    def __init__(self, field: str, row_number: int | None = None):
        self.field = field
        self.row_number = row_number
        where = f" at row {row_number}" if row_number is not None else ""
        super().__init__(f"Missing mandatory field {field!r}{where}")


# Lookup exceptions


class EntityNotFoundError(FieldOpsError):
    """Base exception for unknown entity ids."""

    code: str = "ENTITY_NOT_FOUND"


class ItemNotFoundError(EntityNotFoundError):
    """Inventory item with given id was not found."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Inventory item not found: {item_id}")


class ClientNotFoundError(EntityNotFoundError):
    """Client with given id was not found."""

    code: str = "CLIENT_NOT_FOUND"

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"Client not found: {client_id}")


# Configuration exceptions


class ConfigurationError(FieldOpsError):
    """Configuration file contains unknown keys or invalid values."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)
