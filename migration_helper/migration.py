"""
Helm chart migration

Runs one migration of a StatefulSet deployed by the public cockroachdb Helm
chart: read phase first, then every emitter writes its manifests.
"""

import os
from typing import Any, Dict, List, Optional

import yaml

from .constants import (
    CRDB_NODE_YAML,
    HELM_RELEASE_NAME_ANNOTATION,
    HELM_RELEASE_NAMESPACE_ANNOTATION,
    HELM_VALUES_YAML,
)
from .emitters import build_crdb_node, build_helm_values, update_public_service, write_rbac
from .errors import MigrationError
from .input_builder import build_migration_input_from_statefulset
from .logger import log_info
from .manifest_writer import write_yaml
from .models import MigrationContext, MigrationRecord


class HelmChartMigration:
    """Generates operator manifests for a Helm-deployed StatefulSet"""

    def __init__(self, ctx: MigrationContext, statefulset_manifest: Optional[str] = None):
        """Initialize HelmChartMigration

        Args:
            ctx: Migration context
            statefulset_manifest: Optional path to a StatefulSet backup used
                                  instead of reading it from the cluster
        """
        if not ctx.cloud_provider or not ctx.cloud_region:
            raise MigrationError('cloud provider and cloud region are required')
        self.ctx = ctx
        self.statefulset_manifest = statefulset_manifest

    def load_statefulset(self) -> Dict[str, Any]:
        """Read the StatefulSet from the backup file or the cluster"""
        if self.statefulset_manifest:
            with open(self.statefulset_manifest) as f:
                sts = yaml.safe_load(f)
            if not isinstance(sts, dict) or sts.get('kind') != 'StatefulSet':
                raise MigrationError(f'{self.statefulset_manifest} does not contain a StatefulSet')
            return sts
        return self.ctx.client.get_statefulset(self.ctx.namespace, self.ctx.statefulset_name)

    def find_node_names(self, sts: Dict[str, Any]) -> List[str]:
        """Kubernetes node name of every replica, by ordinal"""
        name = sts['metadata']['name']
        node_names = []
        for index in range(sts.get('spec', {}).get('replicas', 1)):
            pod_name = f'{name}-{index}'
            pod = self.ctx.client.get_pod(self.ctx.namespace, pod_name)
            node_name = pod.get('spec', {}).get('nodeName')
            if not node_name:
                raise MigrationError(f"pod {pod_name} isn't scheduled to a node")
            node_names.append(node_name)
        return node_names

    def generate(self) -> MigrationRecord:
        """Run the migration and write all manifests into the output directory

        Returns:
            The MigrationRecord the manifests were built from
        """
        ctx = self.ctx
        os.makedirs(ctx.output_dir, exist_ok=True)

        print("[1/5] Reading StatefulSet...")
        sts = self.load_statefulset()
        sts.setdefault('metadata', {}).setdefault('namespace', ctx.namespace)
        cluster_name = sts['metadata']['name']
        print(f"  ✓ Loaded StatefulSet {ctx.namespace}/{cluster_name}")
        print()

        print("[2/5] Building migration input...")
        # Every cluster read happens here, before anything is written to output_dir
        node_names = self.find_node_names(sts)
        public_service = ctx.client.get_service(ctx.namespace, f'{cluster_name}-public')
        record = build_migration_input_from_statefulset(sts, ctx.client, ctx.namespace)
        print(f"  ✓ Ports sql={record.sql_port} grpc={record.grpc_port} http={record.http_port}, "
              f"tls={'enabled' if record.tls_enabled else 'disabled'}")
        print()

        print("[3/5] Generating RBAC...")
        annotations = sts['metadata'].get('annotations') or {}
        rbac_path = write_rbac(
            cluster_name,
            ctx.namespace,
            ctx.output_dir,
            release_name=annotations.get(HELM_RELEASE_NAME_ANNOTATION),
            release_namespace=annotations.get(HELM_RELEASE_NAMESPACE_ANNOTATION),
        )
        print(f"  ✓ Wrote {rbac_path}")
        print()

        print("[4/5] Updating public Service...")
        update_public_service(
            ctx.client,
            public_service,
            ctx.output_dir,
            mode=ctx.service_mode,
            sql_port=record.sql_port,
            grpc_port=record.grpc_port,
        )
        print(f"  ✓ Public Service handled in '{ctx.service_mode}' mode")
        print()

        print("[5/5] Generating CrdbNode manifests and values.yaml...")
        for index, node_name in enumerate(node_names):
            crdb_node = build_crdb_node(sts, index, node_name, record, ctx.cloud_provider)
            write_yaml(os.path.join(ctx.output_dir, CRDB_NODE_YAML.format(index=index)), crdb_node)
        values = build_helm_values(sts, ctx.cloud_provider, ctx.cloud_region, ctx.namespace, record)
        write_yaml(os.path.join(ctx.output_dir, HELM_VALUES_YAML), values)
        log_info(f"Wrote {len(node_names)} CrdbNode manifest(s) and {HELM_VALUES_YAML}")
        print()

        return record
