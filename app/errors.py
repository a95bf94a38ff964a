class InventoryError(Exception):
    """Base class for failures surfaced to API callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError, ValueError):
    pass


class NotFoundError(InventoryError, LookupError):
    pass


class StoreError(InventoryError):
    """The database failed underneath a store operation."""
