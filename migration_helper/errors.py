"""
Error types raised by the migration transformer

Every error is fatal for the run and propagates to the CLI. Unresolved
environment variables are not errors; they are reported as warnings.
"""
from typing import Optional


class MigrationError(Exception):
    """Base class for all migration failures"""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(MigrationError):
    """A source object is missing from the cluster"""

    def __init__(self, kind: str, name: str, namespace: str):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        super().__init__(f'{kind} {namespace}/{name} not found')


class ParseError(MigrationError):
    """A numeric start flag carries a value that is not a valid port"""

    def __init__(self, flag: str, value: str, reason: str = 'not a base-10 32-bit integer'):
        self.flag = flag
        self.value = value
        super().__init__(f'invalid {flag} value {value!r}: {reason}')


class SerializationError(MigrationError):
    """A manifest could not be marshalled or written"""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f'failed to write {path}: {cause}', details=str(cause))
