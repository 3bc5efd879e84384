"""
CrdbNode emitter
Projects the MigrationRecord and the legacy pod template onto the
operator's CrdbNode custom resource, one per StatefulSet replica
"""
import copy
from typing import Any, Dict

from ..constants import (
    CLOUD_PROVIDER_ANNOTATION,
    CRDB_API_VERSION,
    CRDB_CLUSTER_LABEL,
    CRDB_NODE_FINALIZER,
    CRDB_NODE_KIND,
    NODE_SERVICE_ACCOUNT,
)
from ..models import MigrationRecord
from .common import (
    compact,
    data_store,
    db_container,
    external_certificates,
    format_duration,
    pod_spec,
    pod_template,
)

# Downward-API variable the operator's start script expects
HOST_IP_ENV = {
    'name': 'HostIP',
    'valueFrom': {
        'fieldRef': {
            'apiVersion': 'v1',
            'fieldPath': 'status.hostIP',
        }
    },
}


def build_node_spec(sts: Dict[str, Any], node_name: str, record: MigrationRecord) -> Dict[str, Any]:
    """Build the CrdbNode spec for a pod scheduled on node_name.

    Args:
        sts: Legacy StatefulSet manifest
        node_name: Kubernetes node currently running the replica
        record: Canonical migration record

    Returns:
        CrdbNode spec dict (unset fields omitted)
    """
    template = pod_template(sts)
    spec = pod_spec(sts)
    container = db_container(sts)
    cluster_name = sts['metadata']['name']

    env = copy.deepcopy(container.get('env') or [])
    env.append(copy.deepcopy(HOST_IP_ENV))

    certificates = None
    if record.tls_enabled:
        certificates = {'externalCertificates': external_certificates(cluster_name)}

    grace_period = spec.get('terminationGracePeriodSeconds')

    return compact({
        'nodeName': node_name,
        'join': record.join_cmd,
        'podLabels': copy.deepcopy(template.get('metadata', {}).get('labels')),
        'podAnnotations': copy.deepcopy(template.get('metadata', {}).get('annotations')),
        'flags': record.flags_dict(),
        'localityLabels': list(record.locality_labels),
        'dataStore': data_store(sts),
        'loggingConfigMapName': record.logging_config_map,
        'env': env,
        'resourceRequirements': copy.deepcopy(container.get('resources')),
        'image': container.get('image'),
        'serviceAccountName': NODE_SERVICE_ACCOUNT,
        'grpcPort': record.grpc_port,
        'sqlPort': record.sql_port,
        'httpPort': record.http_port,
        'certificates': certificates,
        'affinity': copy.deepcopy(spec.get('affinity')),
        'nodeSelector': copy.deepcopy(spec.get('nodeSelector')),
        'tolerations': copy.deepcopy(spec.get('tolerations')),
        'terminationGracePeriod': format_duration(grace_period) if grace_period is not None else None,
    })


def build_crdb_node(sts: Dict[str, Any], index: int, node_name: str,
                    record: MigrationRecord, cloud_provider: str) -> Dict[str, Any]:
    """Build the full CrdbNode manifest adopting replica `index`.

    Args:
        sts: Legacy StatefulSet manifest
        index: Replica ordinal
        node_name: Kubernetes node running that replica
        record: Canonical migration record
        cloud_provider: Cloud provider annotation value

    Returns:
        CrdbNode manifest dict
    """
    cluster_name = sts['metadata']['name']
    return {
        'apiVersion': CRDB_API_VERSION,
        'kind': CRDB_NODE_KIND,
        'metadata': {
            'name': f'{cluster_name}-{index}',
            'namespace': sts['metadata'].get('namespace'),
            'labels': {
                'app': 'cockroachdb',
                'svc': 'cockroachdb',
                CRDB_CLUSTER_LABEL: cluster_name,
            },
            'annotations': {
                CLOUD_PROVIDER_ANNOTATION: cloud_provider,
            },
            'finalizers': [CRDB_NODE_FINALIZER],
        },
        'spec': build_node_spec(sts, node_name, record),
    }
