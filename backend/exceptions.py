"""Domain errors raised by the crud layer and mapped to HTTP responses in main.py."""


class InventoryError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(InventoryError):
    """Malformed or missing input, rejected before touching the database."""
    status_code = 400


class NotFound(InventoryError):
    """An owner-scoped entity does not exist (or belongs to someone else)."""
    status_code = 404


class Conflict(InventoryError):
    """A business rule rejected the operation."""
    status_code = 409


class PersistenceFailure(InventoryError):
    """The database refused a write; the transaction was rolled back."""
    status_code = 500
