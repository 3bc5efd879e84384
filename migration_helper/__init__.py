"""
migration-helper
Migrates a StatefulSet-based cockroachdb deployment to the CockroachDB operator
"""
from .errors import MigrationError, NotFoundError, ParseError, SerializationError
from .models import MigrationContext, MigrationRecord

__all__ = [
    'MigrationError',
    'NotFoundError',
    'ParseError',
    'SerializationError',
    'MigrationContext',
    'MigrationRecord',
]
