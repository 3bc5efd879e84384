#!/usr/bin/env python3
"""
StatefulSet to CockroachDB operator migration helper

Generates the manifests needed to adopt a cockroachdb StatefulSet, deployed
by the public Helm chart, under the CockroachDB operator.

Usage:
    python migrate.py build-manifest helm --statefulset-name cockroachdb \
        --cloud-provider gcp --cloud-region us-central1
"""

import sys

from migration_helper.cli import main


if __name__ == "__main__":
    sys.exit(main())
