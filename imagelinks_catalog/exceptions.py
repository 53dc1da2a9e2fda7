# Base Exception
class CatalogError(Exception):
    # Base exception for link catalog errors
    pass


# Input Exceptions
class InvalidFormatError(CatalogError):
    # Raised when the input shape is malformed (not an array, wrong item types)
    pass


class UnauthorizedError(CatalogError):
    # Raised when the caller lacks administrative rights
    pass


# Lookup Exceptions
class NotFoundError(CatalogError):
    # Raised when a batch delete matched no catalog entry
    pass


class EmptyCatalogError(CatalogError):
    # Raised when a selection is requested from an empty catalog

    def __init__(self, message: str = "No images available in database."):
        super().__init__(message)


# Storage Exceptions
class StorageUnavailableError(CatalogError):
    # Raised when the backing key-value store cannot be read or written

    def __init__(self, message: str = "Storage error", cause: str = ""):
        self.cause = cause
        super().__init__(f"{message}: {cause}" if cause else message)


class CatalogCorruptedError(StorageUnavailableError):
    # Raised when the persisted catalog document is not a JSON array
    pass
