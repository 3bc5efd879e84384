"""
Kubernetes API access for the migration transformer

Wraps the typed kubernetes clients and hands plain manifest dicts to the
rest of the package, so parsing and emitting work the same on objects read
from a cluster, loaded from a backup file, or served by a test fake.
"""
import os
from typing import Any, Dict, Optional

import kubernetes
import kubernetes.client
import kubernetes.config
from kubernetes.client import ApiException

from .errors import MigrationError, NotFoundError
from .logger import log_info


class KubeClient:
    """Thin client over CoreV1Api/AppsV1Api returning manifest dicts"""

    def __init__(self, api_client: kubernetes.client.ApiClient):
        self.api_client = api_client
        self.apps_api = kubernetes.client.AppsV1Api(api_client)
        self.core_api = kubernetes.client.CoreV1Api(api_client)

    @classmethod
    def from_config(cls, kubeconfig: Optional[str] = None) -> 'KubeClient':
        """Build a client from a kubeconfig file or the in-cluster config.

        Args:
            kubeconfig: Path to a kubeconfig file; when unset, in-cluster
                        config is tried before the default kubeconfig

        Raises:
            MigrationError: If an explicit kubeconfig path does not exist
            kubernetes.config.ConfigException: If no usable config is found
        """
        if kubeconfig:
            if not os.path.exists(kubeconfig):
                raise MigrationError(f"kubeconfig {kubeconfig} does not exist")
            kubernetes.config.load_kube_config(config_file=kubeconfig)
            log_info(f"Using kubeconfig {kubeconfig}")
        else:
            try:
                kubernetes.config.load_incluster_config()
                log_info("Using in-cluster Kubernetes configuration")
            except kubernetes.config.ConfigException:
                kubernetes.config.load_kube_config()
                log_info("Using default kubeconfig for Kubernetes configuration")
        return cls(kubernetes.client.ApiClient())

    def _to_dict(self, obj: Any) -> Dict[str, Any]:
        return self.api_client.sanitize_for_serialization(obj)

    def get_statefulset(self, namespace: str, name: str) -> Dict[str, Any]:
        """Get a StatefulSet manifest."""
        try:
            return self._to_dict(self.apps_api.read_namespaced_stateful_set(name=name, namespace=namespace))
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError('StatefulSet', name, namespace) from e
            raise

    def get_secret(self, namespace: str, name: str) -> Dict[str, Any]:
        """Get a Secret manifest (data values stay base64 encoded)."""
        try:
            return self._to_dict(self.core_api.read_namespaced_secret(name=name, namespace=namespace))
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError('Secret', name, namespace) from e
            raise

    def get_service(self, namespace: str, name: str) -> Dict[str, Any]:
        """Get a Service manifest."""
        try:
            return self._to_dict(self.core_api.read_namespaced_service(name=name, namespace=namespace))
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError('Service', name, namespace) from e
            raise

    def get_pod(self, namespace: str, name: str) -> Dict[str, Any]:
        """Get a Pod manifest."""
        try:
            return self._to_dict(self.core_api.read_namespaced_pod(name=name, namespace=namespace))
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError('Pod', name, namespace) from e
            raise

    def apply_configmap(self, namespace: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Create a ConfigMap, replacing any existing one with the same name."""
        name = body['metadata']['name']
        try:
            result = self.core_api.create_namespaced_config_map(namespace=namespace, body=body)
        except ApiException as e:
            if e.status != 409:
                raise
            result = self.core_api.replace_namespaced_config_map(name=name, namespace=namespace, body=body)
        return self._to_dict(result)

    def replace_service(self, namespace: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Replace a Service in place."""
        name = body['metadata']['name']
        result = self.core_api.replace_namespaced_service(name=name, namespace=namespace, body=body)
        return self._to_dict(result)
