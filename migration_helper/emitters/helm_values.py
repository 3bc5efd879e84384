"""
Helm values emitter
Builds values.yaml for the operator-managed cockroachdb chart from the
MigrationRecord and the legacy StatefulSet
"""
import copy
from typing import Any, Dict

from ..constants import GRPC_PORT_NAME, SQL_PORT_NAME
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


def build_helm_values(sts: Dict[str, Any], cloud_provider: str, cloud_region: str,
                      namespace: str, record: MigrationRecord) -> Dict[str, Any]:
    """Build the cockroachdb chart values that reproduce the legacy cluster.

    Args:
        sts: Legacy StatefulSet manifest
        cloud_provider: Cloud provider of the region entry
        cloud_region: Region code of the region entry
        namespace: Namespace the cluster runs in
        record: Canonical migration record

    Returns:
        Values dictionary rooted at 'cockroachdb'
    """
    template = pod_template(sts)
    spec = pod_spec(sts)
    container = db_container(sts)
    cluster_name = sts['metadata']['name']
    grace_period = spec.get('terminationGracePeriodSeconds')

    tls = {
        'enabled': record.tls_enabled,
        'selfSigner': {'enabled': False},
        'certManager': {'enabled': False},
        'externalCertificates': {
            'enabled': record.tls_enabled,
            'certificates': external_certificates(cluster_name) if record.tls_enabled else {},
        },
    }

    crdb_cluster = compact({
        'image': {'name': container.get('image')},
        'join': record.join_cmd,
        'podLabels': copy.deepcopy(template.get('metadata', {}).get('labels')),
        'podAnnotations': copy.deepcopy(template.get('metadata', {}).get('annotations')),
        'resources': copy.deepcopy(container.get('resources')),
        'flags': record.flags_dict(),
        'localityLabels': list(record.locality_labels),
        'regions': [
            {
                'namespace': namespace,
                'cloudProvider': cloud_provider,
                'code': cloud_region,
                'nodes': sts.get('spec', {}).get('replicas', 1),
                'domain': '',
            }
        ],
        'dataStore': data_store(sts),
        'service': {
            'ports': {
                GRPC_PORT_NAME: {'port': record.grpc_port, 'name': GRPC_PORT_NAME},
                SQL_PORT_NAME: {'port': record.sql_port, 'name': SQL_PORT_NAME},
                'http': {'port': record.http_port, 'name': 'http'},
            }
        },
        'affinity': copy.deepcopy(spec.get('affinity')),
        'nodeSelector': copy.deepcopy(spec.get('nodeSelector')),
        'tolerations': copy.deepcopy(spec.get('tolerations')),
        'terminationGracePeriod': format_duration(grace_period) if grace_period is not None else None,
        'loggingConfigMapName': record.logging_config_map,
        'env': copy.deepcopy(container.get('env')),
    })

    return {
        'cockroachdb': {
            'tls': tls,
            'crdbCluster': crdb_cluster,
        }
    }
