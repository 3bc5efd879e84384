"""
RBAC emitter
ClusterRole and ClusterRoleBinding the operator-managed nodes need, owned by
the legacy Helm release so they are not stranded by a later uninstall
"""
import copy
import os
from typing import Any, Dict, List, Optional

from ..constants import (
    HELM_RELEASE_NAME_ANNOTATION,
    HELM_RELEASE_NAMESPACE_ANNOTATION,
    MANAGED_BY_HELM,
    MANAGED_BY_LABEL,
    RBAC_YAML,
)
from ..manifest_writer import write_yaml_documents

RBAC_API_GROUP = 'rbac.authorization.k8s.io'
RBAC_API_VERSION = f'{RBAC_API_GROUP}/v1'

CLUSTER_ROLE_RULES = [
    {
        'apiGroups': [''],
        'resources': ['nodes'],
        'verbs': ['get'],
    },
    {
        'apiGroups': ['certificates.k8s.io'],
        'resources': ['certificatesigningrequests'],
        'verbs': ['create', 'get', 'watch'],
    },
]


def _release_metadata(cluster_name: str, release_name: str, release_namespace: str) -> Dict[str, Any]:
    return {
        'name': cluster_name,
        'labels': {
            MANAGED_BY_LABEL: MANAGED_BY_HELM,
        },
        'annotations': {
            HELM_RELEASE_NAME_ANNOTATION: release_name,
            HELM_RELEASE_NAMESPACE_ANNOTATION: release_namespace,
        },
    }


def build_rbac(cluster_name: str, namespace: str, release_name: Optional[str] = None,
               release_namespace: Optional[str] = None) -> List[Dict[str, Any]]:
    """Build the ClusterRole and ClusterRoleBinding for a cluster.

    Args:
        cluster_name: Cluster (StatefulSet) name; also the ServiceAccount bound
        namespace: Namespace of the ServiceAccount
        release_name: Owning Helm release, defaults to cluster_name
        release_namespace: Namespace of the release, defaults to namespace

    Returns:
        [ClusterRole, ClusterRoleBinding]
    """
    release_name = release_name or cluster_name
    release_namespace = release_namespace or namespace

    cluster_role = {
        'apiVersion': RBAC_API_VERSION,
        'kind': 'ClusterRole',
        'metadata': _release_metadata(cluster_name, release_name, release_namespace),
        'rules': copy.deepcopy(CLUSTER_ROLE_RULES),
    }

    cluster_role_binding = {
        'apiVersion': RBAC_API_VERSION,
        'kind': 'ClusterRoleBinding',
        'metadata': _release_metadata(cluster_name, release_name, release_namespace),
        'roleRef': {
            'apiGroup': RBAC_API_GROUP,
            'kind': 'ClusterRole',
            'name': cluster_name,
        },
        'subjects': [
            {
                'kind': 'ServiceAccount',
                'name': cluster_name,
                'namespace': namespace,
            }
        ],
    }

    return [cluster_role, cluster_role_binding]


def write_rbac(cluster_name: str, namespace: str, output_dir: str,
               release_name: Optional[str] = None, release_namespace: Optional[str] = None) -> str:
    """Write rbac.yaml (ClusterRole, then ClusterRoleBinding) into output_dir.

    Returns:
        Path of the written file
    """
    path = os.path.join(output_dir, RBAC_YAML)
    write_yaml_documents(path, build_rbac(cluster_name, namespace, release_name, release_namespace))
    return path
