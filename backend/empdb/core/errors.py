class EmployeeDbError(Exception):
    """Base class for every failure raised by the employee database."""

    pass


class DatabaseIOError(EmployeeDbError):
    """Raised when opening, reading, writing or seeking the database file fails."""

    pass


class AlreadyExistsError(DatabaseIOError):
    """Raised when a new database is requested on a path that already exists."""

    pass


class DatabaseNotFoundError(DatabaseIOError):
    """Raised when an existing database is requested on a path that does not exist."""

    pass


class DatabaseLockedError(DatabaseIOError):
    """Raised when another handle already holds the exclusive lock on the file."""

    pass


class ShortReadError(EmployeeDbError):
    """Raised when fewer bytes are available than a fixed-size structure requires."""

    pass


class CorruptRecordError(EmployeeDbError):
    """Raised when a stored record breaks the fixed layout, e.g. an unterminated text field."""

    pass


class HeaderValidationError(EmployeeDbError):
    """Raised when the file header is corrupt."""

    check = "header"


class BadMagicError(HeaderValidationError):
    """Raised when the header magic does not identify an employee database."""

    check = "magic"


class UnsupportedVersionError(HeaderValidationError):
    """Raised when the header carries a format version other than the supported one."""

    check = "version"


class SizeMismatchError(HeaderValidationError):
    """Raised when the header filesize differs from the real length of the file."""

    check = "filesize"


class MalformedInputError(EmployeeDbError):
    """Raised when add-employee text is not of the form name,address,hours."""

    pass


class StoreFullError(EmployeeDbError):
    """Raised when the record count would overflow the 16-bit header field."""

    pass


# Mapping of custom exceptions to HTTP status codes
CUSTOM_ERRORS = {
    AlreadyExistsError: 409,
    DatabaseNotFoundError: 404,
    DatabaseLockedError: 423,
    DatabaseIOError: 500,
    ShortReadError: 422,
    CorruptRecordError: 422,
    BadMagicError: 422,
    UnsupportedVersionError: 422,
    SizeMismatchError: 422,
    HeaderValidationError: 422,
    MalformedInputError: 400,
    StoreFullError: 409,
    EmployeeDbError: 500,
}


def status_code_for(exc: EmployeeDbError) -> int:
    for cls in type(exc).__mro__:
        if cls in CUSTOM_ERRORS:
            return CUSTOM_ERRORS[cls]
    return 500
