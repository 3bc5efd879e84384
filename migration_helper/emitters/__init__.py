"""
Manifest emitters
Project a MigrationRecord onto the operator's resources and patch the
cluster objects the operator expects to find
"""
from .crdbnode import build_node_spec, build_crdb_node
from .helm_values import build_helm_values
from .rbac import build_rbac, write_rbac
from .public_service import patch_public_service, update_public_service

__all__ = [
    'build_node_spec',
    'build_crdb_node',
    'build_helm_values',
    'build_rbac',
    'write_rbac',
    'patch_public_service',
    'update_public_service',
]
