"""
Public Service emitter
Makes the public Service expose the 'grpc' and 'sql' ports the operator
expects, either as a manifest file or by replacing the Service in place
"""
import copy
import os
from typing import Any, Dict

from ..constants import (
    DEFAULT_GRPC_PORT,
    DEFAULT_SQL_PORT,
    GRPC_PORT_NAME,
    PORT_PROTOCOL,
    PUBLIC_SERVICE_YAML,
    SERVICE_MODE_APPLY,
    SERVICE_MODE_FILE,
    SERVICE_MODES,
    SQL_PORT_NAME,
)
from ..logger import log_success
from ..manifest_writer import write_yaml


def _service_port(name: str, port: int) -> Dict[str, Any]:
    return {
        'name': name,
        'protocol': PORT_PROTOCOL,
        'port': port,
        'targetPort': name,
    }


def patch_public_service(svc: Dict[str, Any], sql_port: int = DEFAULT_SQL_PORT,
                         grpc_port: int = DEFAULT_GRPC_PORT) -> Dict[str, Any]:
    """Return a copy of svc whose 'grpc' and 'sql' ports match the operator.

    Ports with either name are replaced in place, missing ones are appended
    in grpc, sql order; every other port and field is kept as is.

    Args:
        svc: Public Service manifest
        sql_port: Service port for SQL traffic
        grpc_port: Service port for gRPC traffic

    Returns:
        Patched Service manifest
    """
    patched = copy.deepcopy(svc)
    spec = patched.setdefault('spec', {})
    ports = spec.get('ports') or []

    wanted = {
        GRPC_PORT_NAME: _service_port(GRPC_PORT_NAME, grpc_port),
        SQL_PORT_NAME: _service_port(SQL_PORT_NAME, sql_port),
    }
    found = set()
    for i, port in enumerate(ports):
        name = port.get('name')
        if name in wanted:
            ports[i] = wanted[name]
            found.add(name)

    for name in (GRPC_PORT_NAME, SQL_PORT_NAME):
        if name not in found:
            ports.append(wanted[name])

    spec['ports'] = ports
    patched['apiVersion'] = 'v1'
    patched['kind'] = 'Service'
    return patched


def update_public_service(client, svc: Dict[str, Any], output_dir: str,
                          mode: str = SERVICE_MODE_FILE, sql_port: int = DEFAULT_SQL_PORT,
                          grpc_port: int = DEFAULT_GRPC_PORT) -> Dict[str, Any]:
    """Patch an already fetched public Service and persist it according to mode.

    Args:
        client: KubeClient (or fake), used in 'apply' mode
        svc: Public Service manifest, e.g. cockroachdb-public
        output_dir: Directory receiving public-service.yaml in 'file' mode
        mode: 'file' writes a manifest, 'apply' replaces the Service in the cluster
        sql_port: Service port for SQL traffic
        grpc_port: Service port for gRPC traffic

    Returns:
        The patched Service manifest

    Raises:
        ValueError: If mode is unknown
    """
    if mode not in SERVICE_MODES:
        raise ValueError(f"Unknown service mode '{mode}', expected one of {', '.join(SERVICE_MODES)}")

    namespace = svc['metadata'].get('namespace')
    name = svc['metadata']['name']
    patched = patch_public_service(svc, sql_port=sql_port, grpc_port=grpc_port)

    if mode == SERVICE_MODE_APPLY:
        client.replace_service(namespace, patched)
        log_success(f"Service {namespace}/{name} updated in cluster")
    else:
        write_yaml(os.path.join(output_dir, PUBLIC_SERVICE_YAML), patched)

    return patched
