class FilmDbError(Exception):
    """Base error for all user-facing filmdb exceptions."""


class MalformedWorkbook(FilmDbError):
    """Raised when a buffer cannot be opened as a workbook at all."""


class UnknownCategoryError(FilmDbError):
    """Raised when a category id is not one of the four catalogue kinds."""


class RecordValidationError(FilmDbError):
    """Raised when user-entered values fail required-field or serial checks."""


class RecordNotFound(FilmDbError):
    """Raised when a record id does not exist in the in-memory catalogue."""


class StorageError(FilmDbError):
    """Raised when the storage collaborator cannot read or write the workbook."""


class StorageNotFound(StorageError):
    """Raised when the workbook file does not exist yet."""
