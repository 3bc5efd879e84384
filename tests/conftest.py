"""
Shared fixtures: an in-memory stand-in for KubeClient and the chart fixtures
"""
import base64
import copy
from pathlib import Path

import pytest
import yaml

from migration_helper.errors import NotFoundError

TESTDATA = Path(__file__).parent / 'testdata'


class FakeKubeClient:
    """Serves and stores manifest dicts keyed by (namespace, name)"""

    def __init__(self):
        self.statefulsets = {}
        self.secrets = {}
        self.configmaps = {}
        self.services = {}
        self.pods = {}
        self.calls = []

    def _get(self, store, kind, namespace, name):
        self.calls.append(('get', kind, namespace, name))
        if (namespace, name) not in store:
            raise NotFoundError(kind, name, namespace)
        return copy.deepcopy(store[(namespace, name)])

    def get_statefulset(self, namespace, name):
        return self._get(self.statefulsets, 'StatefulSet', namespace, name)

    def get_secret(self, namespace, name):
        return self._get(self.secrets, 'Secret', namespace, name)

    def get_service(self, namespace, name):
        return self._get(self.services, 'Service', namespace, name)

    def get_pod(self, namespace, name):
        return self._get(self.pods, 'Pod', namespace, name)

    def apply_configmap(self, namespace, body):
        self.calls.append(('apply', 'ConfigMap', namespace, body['metadata']['name']))
        self.configmaps[(namespace, body['metadata']['name'])] = copy.deepcopy(body)
        return copy.deepcopy(body)

    def replace_service(self, namespace, body):
        self.calls.append(('replace', 'Service', namespace, body['metadata']['name']))
        self.services[(namespace, body['metadata']['name'])] = copy.deepcopy(body)
        return copy.deepcopy(body)


def load_testdata(name):
    with open(TESTDATA / name) as f:
        return yaml.safe_load(f)


def make_secret(name, namespace, data):
    return {
        'apiVersion': 'v1',
        'kind': 'Secret',
        'metadata': {'name': name, 'namespace': namespace},
        'data': {k: base64.b64encode(v.encode('utf-8')).decode('ascii') for k, v in data.items()},
    }


@pytest.fixture
def statefulset():
    """StatefulSet deployed by the public cockroachdb chart"""
    return load_testdata('cockroachdb-statefulset.yaml')


@pytest.fixture
def public_service():
    """cockroachdb-public Service deployed by the public chart"""
    return load_testdata('cockroachdb-public.yaml')


@pytest.fixture
def kube(statefulset, public_service):
    """Fake cluster holding the chart's objects, pods scheduled on node-0..2"""
    client = FakeKubeClient()
    client.statefulsets[('default', 'cockroachdb')] = statefulset
    client.services[('default', 'cockroachdb-public')] = public_service
    client.secrets[('default', 'cockroachdb-log-config')] = make_secret(
        'cockroachdb-log-config', 'default', {'log-config.yaml': 'sinks:\n  stderr:\n    filter: INFO\n'})
    for i in range(3):
        client.pods[('default', f'cockroachdb-{i}')] = {
            'metadata': {'name': f'cockroachdb-{i}', 'namespace': 'default'},
            'spec': {'nodeName': f'node-{i}'},
        }
    return client
