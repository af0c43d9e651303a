class ColStoreError(Exception):
    """Base class for py_colstore errors."""
    pass

class InvalidDocumentError(ColStoreError, ValueError):
    """Raised when a document to insert is not a JSON object."""
    pass

class PoolClosedError(ColStoreError):
    """Raised when a closed pool is asked for a database."""
    pass

class ConfigError(ColStoreError):
    """Raised when colstore.toml cannot be read or parsed."""
    pass

class DatabaseClosedError(ColStoreError):
    """Raised when a closed database is asked for a collection."""
    pass

class CollectionClosedError(ColStoreError):
    """Raised when a closed collection is used."""
    pass
