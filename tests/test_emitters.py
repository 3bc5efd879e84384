"""
Tests for the manifest emitters - RBAC, public Service, CrdbNode and values
"""
import os

import pytest
import yaml

from migration_helper.emitters import (
    build_crdb_node,
    build_helm_values,
    build_node_spec,
    build_rbac,
    patch_public_service,
    update_public_service,
    write_rbac,
)
from migration_helper.emitters.common import compact, data_store, format_duration
from migration_helper.models import MigrationRecord


@pytest.fixture
def record():
    """MigrationRecord of the chart fixture"""
    return MigrationRecord(
        sql_port=26257,
        grpc_port=26258,
        http_port=8080,
        join_cmd='cockroachdb-0.cockroachdb.default.svc.cluster.local:26257',
        flags={'--cache': '25%', '--max-sql-memory': '25%'},
        tls_enabled=True,
        logging_config_map='cockroachdb-log-config',
        locality_labels=('country', 'region'),
    )


class TestRbacEmitter:
    """Test ClusterRole and ClusterRoleBinding generation"""

    def test_build_rbac(self):
        cluster_role, binding = build_rbac('cockroachdb', 'default')

        assert cluster_role['kind'] == 'ClusterRole'
        assert cluster_role['metadata']['name'] == 'cockroachdb'
        assert cluster_role['metadata']['labels'] == {'app.kubernetes.io/managed-by': 'Helm'}
        assert cluster_role['metadata']['annotations'] == {
            'meta.helm.sh/release-name': 'cockroachdb',
            'meta.helm.sh/release-namespace': 'default',
        }
        assert cluster_role['rules'] == [
            {'apiGroups': [''], 'resources': ['nodes'], 'verbs': ['get']},
            {
                'apiGroups': ['certificates.k8s.io'],
                'resources': ['certificatesigningrequests'],
                'verbs': ['create', 'get', 'watch'],
            },
        ]

        assert binding['kind'] == 'ClusterRoleBinding'
        assert binding['roleRef'] == {
            'apiGroup': 'rbac.authorization.k8s.io',
            'kind': 'ClusterRole',
            'name': 'cockroachdb',
        }
        assert binding['subjects'] == [
            {'kind': 'ServiceAccount', 'name': 'cockroachdb', 'namespace': 'default'}
        ]

    def test_release_annotations_override(self):
        cluster_role, _ = build_rbac('crdb', 'db', release_name='my-release', release_namespace='helm')
        assert cluster_role['metadata']['annotations'] == {
            'meta.helm.sh/release-name': 'my-release',
            'meta.helm.sh/release-namespace': 'helm',
        }

    def test_write_rbac(self, tmp_path):
        path = write_rbac('cockroachdb', 'default', str(tmp_path))

        assert path == os.path.join(str(tmp_path), 'rbac.yaml')
        with open(path) as f:
            docs = list(yaml.safe_load_all(f))
        assert [doc['kind'] for doc in docs] == ['ClusterRole', 'ClusterRoleBinding']

    def test_write_rbac_is_idempotent(self, tmp_path):
        path = write_rbac('cockroachdb', 'default', str(tmp_path))
        with open(path, 'rb') as f:
            first = f.read()

        write_rbac('cockroachdb', 'default', str(tmp_path))
        with open(path, 'rb') as f:
            second = f.read()

        assert first == second

    def test_rules_not_shared_between_calls(self):
        cluster_role, _ = build_rbac('a', 'default')
        cluster_role['rules'][0]['verbs'].append('list')
        assert build_rbac('b', 'default')[0]['rules'][0]['verbs'] == ['get']


class TestPublicServiceEmitter:
    """Test public Service patching"""

    def test_patch_chart_service(self, public_service):
        patched = patch_public_service(public_service)

        assert patched['spec']['ports'] == [
            {'name': 'grpc', 'protocol': 'TCP', 'port': 26258, 'targetPort': 'grpc'},
            {'name': 'http', 'port': 8080, 'protocol': 'TCP', 'targetPort': 'http'},
            {'name': 'sql', 'protocol': 'TCP', 'port': 26257, 'targetPort': 'sql'},
        ]

    def test_patch_keeps_other_fields(self, public_service):
        patched = patch_public_service(public_service)

        assert patched['metadata'] == public_service['metadata']
        assert patched['spec']['selector'] == public_service['spec']['selector']
        assert patched['spec']['clusterIP'] == '34.118.230.78'

    def test_patch_does_not_mutate_input(self, public_service):
        patch_public_service(public_service)
        assert [p['name'] for p in public_service['spec']['ports']] == ['grpc', 'http']

    def test_patch_without_ports(self):
        patched = patch_public_service({'metadata': {'name': 'svc'}}, sql_port=30000, grpc_port=30001)
        assert [(p['name'], p['port']) for p in patched['spec']['ports']] == [('grpc', 30001), ('sql', 30000)]
        assert patched['kind'] == 'Service'

    def test_patch_twice_is_stable(self, public_service):
        once = patch_public_service(public_service)
        assert patch_public_service(once) == once

    def test_update_file_mode(self, kube, public_service, tmp_path):
        update_public_service(kube, public_service, str(tmp_path))

        with open(tmp_path / 'public-service.yaml') as f:
            content = f.read()
        assert 'creationTimestamp: null' not in content
        svc = yaml.safe_load(content)
        assert [p['name'] for p in svc['spec']['ports']] == ['grpc', 'http', 'sql']
        assert not any(call[0] == 'replace' for call in kube.calls)

    def test_update_apply_mode(self, kube, public_service, tmp_path, capsys):
        update_public_service(kube, public_service, str(tmp_path), mode='apply')

        stored = kube.services[('default', 'cockroachdb-public')]
        assert [p['name'] for p in stored['spec']['ports']] == ['grpc', 'http', 'sql']
        assert not (tmp_path / 'public-service.yaml').exists()
        assert '[SUCCESS]' in capsys.readouterr().out

    def test_update_unknown_mode(self, kube, public_service, tmp_path):
        with pytest.raises(ValueError):
            update_public_service(kube, public_service, str(tmp_path), mode='patch')
        assert list(tmp_path.iterdir()) == []

    def test_update_does_not_read_cluster(self, kube, public_service, tmp_path):
        update_public_service(kube, public_service, str(tmp_path))
        assert kube.calls == []


class TestCrdbNodeEmitter:
    """Test CrdbNode generation"""

    def test_build_crdb_node(self, statefulset, record):
        node = build_crdb_node(statefulset, 1, 'node-1', record, 'gcp')

        assert node['apiVersion'] == 'crdb.cockroachlabs.com/v1alpha1'
        assert node['kind'] == 'CrdbNode'
        assert node['metadata']['name'] == 'cockroachdb-1'
        assert node['metadata']['namespace'] == 'default'
        assert node['metadata']['labels']['crdb.cockroachlabs.com/cluster'] == 'cockroachdb'
        assert node['metadata']['annotations'] == {'crdb.cockroachlabs.com/cloudProvider': 'gcp'}
        assert node['metadata']['finalizers'] == ['crdbnode.crdb.cockroachlabs.com/finalizer']

    def test_node_spec(self, statefulset, record):
        spec = build_node_spec(statefulset, 'node-0', record)

        assert spec['nodeName'] == 'node-0'
        assert spec['join'] == record.join_cmd
        assert spec['flags'] == {'--cache': '25%', '--max-sql-memory': '25%'}
        assert spec['localityLabels'] == ['country', 'region']
        assert spec['loggingConfigMapName'] == 'cockroachdb-log-config'
        assert spec['image'] == 'cockroachdb/cockroach:v25.1.5'
        assert spec['serviceAccountName'] == 'cockroachdb'
        assert (spec['sqlPort'], spec['grpcPort'], spec['httpPort']) == (26257, 26258, 8080)
        assert spec['podAnnotations'] == {'crdb': 'is-cool'}
        assert spec['nodeSelector'] == {'cloud.google.com/gke-nodepool': 'default-pool'}
        assert spec['terminationGracePeriod'] == '5m0s'
        assert spec['certificates']['externalCertificates'] == {
            'caConfigMapName': 'cockroachdb-ca',
            'nodeSecretName': 'cockroachdb-node-certs',
            'rootSqlClientSecretName': 'cockroachdb-client-certs',
        }
        assert 'domain' not in spec

    def test_node_spec_env_gets_host_ip(self, statefulset, record):
        spec = build_node_spec(statefulset, 'node-0', record)

        names = [var['name'] for var in spec['env']]
        assert names == ['STATEFULSET_NAME', 'STATEFULSET_FQDN', 'COCKROACH_CHANNEL', 'GODEBUG', 'HostIP']
        assert spec['env'][-1]['valueFrom']['fieldRef']['fieldPath'] == 'status.hostIP'
        container = statefulset['spec']['template']['spec']['containers'][0]
        assert len(container['env']) == 4

    def test_node_spec_without_tls(self, statefulset):
        spec = build_node_spec(statefulset, 'node-0', MigrationRecord(tls_enabled=False))
        assert 'certificates' not in spec
        assert 'flags' not in spec
        assert 'loggingConfigMapName' not in spec


class TestHelmValuesEmitter:
    """Test values.yaml generation"""

    def test_build_helm_values(self, statefulset, record):
        values = build_helm_values(statefulset, 'gcp', 'us-central1', 'default', record)
        cluster = values['cockroachdb']['crdbCluster']

        assert cluster['image'] == {'name': 'cockroachdb/cockroach:v25.1.5'}
        assert cluster['regions'] == [
            {'namespace': 'default', 'cloudProvider': 'gcp', 'code': 'us-central1', 'nodes': 3, 'domain': ''}
        ]
        assert cluster['service']['ports'] == {
            'grpc': {'port': 26258, 'name': 'grpc'},
            'sql': {'port': 26257, 'name': 'sql'},
            'http': {'port': 8080, 'name': 'http'},
        }
        assert cluster['localityLabels'] == ['country', 'region']
        assert cluster['loggingConfigMapName'] == 'cockroachdb-log-config'
        assert cluster['terminationGracePeriod'] == '5m0s'
        assert cluster['dataStore']['volumeClaimTemplate']['spec']['resources'] == {
            'requests': {'storage': '100Gi'}
        }

    def test_tls_values(self, statefulset, record):
        tls = build_helm_values(statefulset, 'gcp', 'us-central1', 'default', record)['cockroachdb']['tls']

        assert tls['enabled'] is True
        assert tls['selfSigner'] == {'enabled': False}
        assert tls['certManager'] == {'enabled': False}
        assert tls['externalCertificates']['enabled'] is True
        assert tls['externalCertificates']['certificates']['nodeSecretName'] == 'cockroachdb-node-certs'

    def test_tls_disabled(self, statefulset):
        values = build_helm_values(statefulset, 'gcp', 'us-central1', 'default', MigrationRecord())
        assert values['cockroachdb']['tls']['enabled'] is False
        assert values['cockroachdb']['tls']['externalCertificates'] == {'enabled': False, 'certificates': {}}


class TestCommonHelpers:
    """Test shared emitter helpers"""

    @pytest.mark.parametrize('seconds, expected', [
        (0, '0s'),
        (30, '30s'),
        (300, '5m0s'),
        (3725, '1h2m5s'),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_compact(self):
        assert compact({'a': 1, 'b': None, 'c': '', 'd': {}, 'e': [], 'f': False, 'g': 0}) == {
            'a': 1, 'f': False, 'g': 0
        }

    def test_data_store_without_templates(self):
        assert data_store({'spec': {}}) == {'volumeClaimTemplate': {'metadata': {'name': 'datadir'}}}
