"""Shared exceptions for service layer operations."""


class PersistenceError(Exception):
    """
    Raised when the gateway or the key-value store rejects an operation.

    There is no distinction between transient and permanent failures; callers
    decide whether to surface or retry.

    Attributes:
        operation: Name of the rejected operation (e.g. "save_note", "store").
        note_id: Id of the note the operation targeted, if any.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        note_id: str | None = None,
    ) -> None:
        self.operation = operation
        self.note_id = note_id
        super().__init__(message)
