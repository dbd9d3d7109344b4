class PbfgenError(Exception):
    """Base exception for all pbfgen errors."""


class UnresolvedTypeError(PbfgenError):
    """Exception raised when a field type cannot be dispatched."""
    def __init__(self, message: str):
        super().__init__(message)


class DefaultCastError(PbfgenError):
    """Exception raised when a default literal cannot be cast to its field type."""
    def __init__(self, message: str):
        super().__init__(message)


class SchemaLoadError(PbfgenError):
    """Exception raised when a schema description cannot be loaded."""
    def __init__(self, message: str):
        super().__init__(message)


class PbfDecodeError(PbfgenError):
    """Exception raised when the wire data cannot be decoded."""
    def __init__(self, message: str):
        super().__init__(message)
