"""
Migration Input Builder

Reads the legacy StatefulSet and assembles the canonical MigrationRecord,
converting the logging Secret into a ConfigMap on the way.
"""
from typing import Any, Dict, Optional

from .arg_parser import extract_start_args, parse_locality_labels, parse_start_args
from .constants import (
    CERTS_VOLUME_NAME,
    CRDB_CONTAINER_NAME,
    LOG_CONFIG_KEY_RENAMES,
    LOG_CONFIG_VOLUME_NAME,
)
from .errors import MigrationError
from .models import MigrationContext, MigrationRecord
from .secret_converter import convert_secret_to_configmap


def find_db_container(pod_spec: Dict[str, Any]) -> Dict[str, Any]:
    """Return the database container ('db'), falling back to the first container"""
    containers = pod_spec.get('containers') or []
    if not containers:
        raise MigrationError('StatefulSet pod template has no containers')
    for container in containers:
        if container.get('name') == CRDB_CONTAINER_NAME:
            return container
    return containers[0]


def declared_env(container: Dict[str, Any]) -> Dict[str, str]:
    """Literal environment values of a container.

    Entries sourced through valueFrom have no value known at migration time
    and are left undeclared.
    """
    env = {}
    for var in container.get('env') or []:
        if var.get('value') is not None:
            env[var['name']] = var['value']
    return env


def has_certs_mount(container: Dict[str, Any]) -> bool:
    return any(m.get('name') == CERTS_VOLUME_NAME for m in container.get('volumeMounts') or [])


def build_migration_input(ctx: MigrationContext) -> MigrationRecord:
    """Fetch the source StatefulSet and build its MigrationRecord.

    Args:
        ctx: Migration context (client, namespace, StatefulSet name)

    Returns:
        The completed MigrationRecord

    Raises:
        NotFoundError: If the StatefulSet or the logging Secret is missing
        ParseError: If a port flag is malformed
    """
    sts = ctx.client.get_statefulset(ctx.namespace, ctx.statefulset_name)
    return build_migration_input_from_statefulset(sts, ctx.client, ctx.namespace)


def build_migration_input_from_statefulset(sts: Dict[str, Any], client,
                                           namespace: Optional[str] = None) -> MigrationRecord:
    """Build a MigrationRecord from an already loaded StatefulSet manifest.

    Steps run in a fixed order and stop at the first error: start arguments
    are parsed before the logging Secret is converted, so a malformed flag
    never leaves a ConfigMap behind.

    Args:
        sts: StatefulSet manifest
        client: KubeClient (or fake) used for the Secret conversion
        namespace: Namespace override; defaults to the StatefulSet's own

    Returns:
        The completed MigrationRecord
    """
    namespace = namespace or sts.get('metadata', {}).get('namespace') or 'default'
    pod_spec = sts.get('spec', {}).get('template', {}).get('spec', {})

    container = find_db_container(pod_spec)
    env = declared_env(container)
    parsed = parse_start_args(extract_start_args(container), env)

    logging_config_map = ''
    for volume in pod_spec.get('volumes') or []:
        if volume.get('name') != LOG_CONFIG_VOLUME_NAME:
            continue
        if volume.get('secret'):
            logging_config_map = volume['secret']['secretName']
            convert_secret_to_configmap(client, namespace, logging_config_map, LOG_CONFIG_KEY_RENAMES)
        elif volume.get('configMap'):
            logging_config_map = volume['configMap']['name']

    tls_enabled = not parsed.insecure and (bool(parsed.certs_dir) or has_certs_mount(container))

    return MigrationRecord(
        sql_port=parsed.sql_port,
        grpc_port=parsed.grpc_port,
        http_port=parsed.http_port,
        join_cmd=parsed.join_cmd,
        flags=parsed.flags,
        tls_enabled=tls_enabled,
        logging_config_map=logging_config_map,
        locality_labels=parse_locality_labels(parsed.locality),
    )
