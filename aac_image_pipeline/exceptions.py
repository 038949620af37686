"""
Custom exceptions
"""

from typing import List, Optional


class GeneratorError(Exception):
    """Base error for the pipeline"""
    pass


class ConfigurationError(GeneratorError):
    """Configuration error"""

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class PathNotFoundError(GeneratorError):
    """Path does not exist"""

    def __init__(self, path: str, message: str = None):
        self.path = path
        msg = message or f"Path not found: {path}"
        super().__init__(msg)


class InputSyntaxError(GeneratorError):
    """Input file is not valid JSON"""

    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message)


class InputValidationError(GeneratorError):
    """Input file structure is invalid; carries every violation found"""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        lines = "\n  - ".join(self.errors)
        super().__init__(f"Invalid JSON structure:\n  - {lines}")


class APIError(GeneratorError):
    """Image generation API error"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class StorageError(GeneratorError):
    """Object storage error"""

    def __init__(self, message: str, key: str = None):
        self.key = key
        super().__init__(message)


class DatabaseError(GeneratorError):
    """Backend database error"""

    def __init__(self, message: str, code: str = None, status_code: Optional[int] = None):
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class OutputError(GeneratorError):
    """Local output error"""

    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message)
