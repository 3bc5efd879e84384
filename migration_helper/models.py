"""
Data types shared across the migration transformer

MigrationRecord is the canonical configuration derived from the legacy
StatefulSet; MigrationContext carries the run's targeting and the
Kubernetes client explicitly instead of relying on process-wide state.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from .constants import (
    DEFAULT_GRPC_PORT,
    DEFAULT_HTTP_PORT,
    DEFAULT_SQL_PORT,
    SERVICE_MODE_FILE,
)


@dataclass(frozen=True)
class MigrationRecord:
    """Canonical configuration of a legacy deployment, built once per run"""
    sql_port: int = DEFAULT_SQL_PORT
    grpc_port: int = DEFAULT_GRPC_PORT
    http_port: int = DEFAULT_HTTP_PORT
    join_cmd: str = ''
    flags: Mapping[str, str] = field(default_factory=dict)
    tls_enabled: bool = False
    logging_config_map: str = ''
    locality_labels: Tuple[str, ...] = ()

    # flags is a read-only mapping, which cannot be hashed
    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, 'flags', MappingProxyType(dict(self.flags)))
        object.__setattr__(self, 'locality_labels', tuple(self.locality_labels))

    def flags_dict(self) -> Dict[str, str]:
        """Plain dict copy of the pass-through flags, for serialization"""
        return dict(self.flags)


@dataclass
class ParsedArgs:
    """Intermediate result of parsing the database start command"""
    sql_port: int = DEFAULT_SQL_PORT
    grpc_port: int = DEFAULT_GRPC_PORT
    http_port: int = DEFAULT_HTTP_PORT
    join_cmd: str = ''
    flags: Dict[str, str] = field(default_factory=dict)
    insecure: bool = False
    certs_dir: str = ''
    locality: str = ''


@dataclass
class MigrationContext:
    """Inputs of one migration run: client, target and output settings"""
    client: Any
    namespace: str
    statefulset_name: str
    output_dir: str = './manifests'
    cloud_provider: str = ''
    cloud_region: str = ''
    service_mode: str = SERVICE_MODE_FILE
