"""
Helpers shared by the emitters for reading the legacy StatefulSet
"""
import copy
from typing import Any, Dict

from ..constants import DATA_STORE_CLAIM_NAME
from ..input_builder import find_db_container


def pod_template(sts: Dict[str, Any]) -> Dict[str, Any]:
    return sts.get('spec', {}).get('template', {})


def pod_spec(sts: Dict[str, Any]) -> Dict[str, Any]:
    return pod_template(sts).get('spec', {})


def db_container(sts: Dict[str, Any]) -> Dict[str, Any]:
    return find_db_container(pod_spec(sts))


def data_store(sts: Dict[str, Any]) -> Dict[str, Any]:
    """Operator dataStore built from the StatefulSet's first volume claim template"""
    templates = sts.get('spec', {}).get('volumeClaimTemplates') or []
    claim = {'metadata': {'name': DATA_STORE_CLAIM_NAME}}
    if templates:
        claim['spec'] = copy.deepcopy(templates[0].get('spec', {}))
    return {'volumeClaimTemplate': claim}


def external_certificates(cluster_name: str) -> Dict[str, str]:
    """Names of the CA ConfigMap and cert Secrets migrated alongside the cluster"""
    return {
        'caConfigMapName': f'{cluster_name}-ca',
        'nodeSecretName': f'{cluster_name}-node-certs',
        'rootSqlClientSecretName': f'{cluster_name}-client-certs',
    }


def format_duration(seconds: int) -> str:
    """Format seconds the way the operator's duration fields print (e.g. '5m0s')"""
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f'{hours}h{minutes}m{secs}s'
    if minutes:
        return f'{minutes}m{secs}s'
    return f'{secs}s'


def compact(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset fields (None, '', {} and []) like omitempty serialization"""
    return {k: v for k, v in fields.items() if v is not None and v != '' and v != {} and v != []}
