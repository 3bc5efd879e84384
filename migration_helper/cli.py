"""
migration-helper command line

Usage:
    python migrate.py build-manifest helm --statefulset-name cockroachdb \
        --cloud-provider gcp --cloud-region us-central1
    python migrate.py build-manifest helm --statefulset-name cockroachdb \
        --namespace crdb --cloud-provider gcp --cloud-region us-central1 \
        --output-dir ./manifests --apply-service

Arguments:
    --statefulset-name: Name of the cockroachdb StatefulSet resource
    --namespace: Namespace of the StatefulSet (default: default)
    --cloud-provider / --cloud-region: Region entry for the operator values
    --kubeconfig: Path to kubeconfig file (default: in-cluster config,
                  then ~/.kube/config)
    --output-dir: Manifest output directory (default: ./manifests)
    --statefulset-manifest: Read the StatefulSet from a backup file instead
    --apply-service: Replace the public Service in the cluster instead of
                     writing public-service.yaml
"""

import argparse
import os

from kubernetes.client import ApiException
from kubernetes.config import ConfigException

from .constants import SERVICE_MODE_APPLY, SERVICE_MODE_FILE
from .errors import MigrationError
from .kube_client import KubeClient
from .logger import log_error, log_success
from .migration import HelmChartMigration
from .models import MigrationContext


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="migration-helper",
        description="Help users of the public cockroachdb Helm chart migrate to the CockroachDB operator",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    build_manifest = commands.add_parser(
        "build-manifest",
        help="Generate migration manifests for the CockroachDB operator",
    )
    sources = build_manifest.add_subparsers(dest="source", required=True)

    helm = sources.add_parser(
        "helm",
        help="Generate migration manifests from a StatefulSet deployed by the cockroachdb Helm chart",
    )
    helm.add_argument(
        "--statefulset-name",
        required=True,
        help="Name of cockroachdb statefulset resource",
    )
    helm.add_argument(
        "--namespace",
        default="default",
        help="Namespace of cockroachdb statefulset resource (default: default)",
    )
    helm.add_argument(
        "--cloud-provider",
        required=True,
        help="Name of cloud provider",
    )
    helm.add_argument(
        "--cloud-region",
        required=True,
        help="Name of cloud provider region",
    )
    helm.add_argument(
        "--kubeconfig",
        help="Path to kubeconfig file (default: in-cluster config, then ~/.kube/config)",
    )
    helm.add_argument(
        "--output-dir",
        default="./manifests",
        help="Manifest output directory (default: ./manifests)",
    )
    helm.add_argument(
        "--statefulset-manifest",
        help="Path to a StatefulSet backup manifest, read instead of the live object",
    )
    helm.add_argument(
        "--apply-service",
        action="store_true",
        help="Update the public Service in the cluster instead of writing public-service.yaml",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    output_dir = os.path.abspath(args.output_dir)

    print("CockroachDB Helm chart to operator migration")
    print("=" * 60)
    print(f"StatefulSet: {args.namespace}/{args.statefulset_name}")
    print(f"Output directory: {output_dir}")
    print("=" * 60)
    print()

    try:
        ctx = MigrationContext(
            client=KubeClient.from_config(args.kubeconfig),
            namespace=args.namespace,
            statefulset_name=args.statefulset_name,
            output_dir=output_dir,
            cloud_provider=args.cloud_provider,
            cloud_region=args.cloud_region,
            service_mode=SERVICE_MODE_APPLY if args.apply_service else SERVICE_MODE_FILE,
        )
        HelmChartMigration(ctx, statefulset_manifest=args.statefulset_manifest).generate()
    except (MigrationError, ApiException, ConfigException, OSError) as e:
        log_error(f"Migration failed: {e}")
        return 1

    print("=" * 60)
    log_success("Migration manifests successfully generated.")
    print(f"  Output directory: {output_dir}")
    print("\nNext steps:")
    print(f"  1. Review the generated YAML files under {output_dir}")
    print("  2. Apply rbac.yaml and the public Service before installing the operator chart")
    print("  3. Monitor the cluster to ensure a smooth transition.")
    print("\nWARNING: always test the generated manifests in a staging environment before")
    print("applying them to a production cluster. Do not generate the manifests once the")
    print("StatefulSet has been scaled down.")
    return 0
