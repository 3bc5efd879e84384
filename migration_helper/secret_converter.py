"""
Secret to ConfigMap conversion

The public chart mounts the logging configuration from a Secret while the
operator reads it from a ConfigMap under its own key name.
"""
import base64
from typing import Any, Dict, Mapping, Optional

from .errors import MigrationError
from .logger import log_success


def decode_secret_data(secret: Dict[str, Any]) -> Dict[str, str]:
    """Decode a Secret's data (base64) and stringData into UTF-8 strings.

    Args:
        secret: Secret manifest as returned by the API

    Returns:
        Key -> decoded value

    Raises:
        MigrationError: If a data value is not base64 encoded UTF-8 text
    """
    decoded = {}
    for key, value in (secret.get('data') or {}).items():
        try:
            decoded[key] = base64.b64decode(value, validate=True).decode('utf-8')
        except ValueError as e:
            metadata = secret.get('metadata', {})
            raise MigrationError(
                f"Secret {metadata.get('namespace')}/{metadata.get('name')} key {key!r} "
                f"is not base64 encoded UTF-8 text",
                details=str(e),
            ) from e
    # stringData wins, matching how the API server merges it on write
    for key, value in (secret.get('stringData') or {}).items():
        decoded[key] = value
    return decoded


def build_configmap_from_secret(secret: Dict[str, Any],
                                key_renames: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Build a ConfigMap carrying the same keys and values as a Secret.

    Args:
        secret: Source Secret manifest
        key_renames: Source key -> target key for keys the consumer expects
                     under a different name

    Returns:
        ConfigMap manifest with the Secret's name and namespace
    """
    key_renames = key_renames or {}
    metadata = secret.get('metadata', {})
    data = {}
    for key, value in decode_secret_data(secret).items():
        data[key_renames.get(key, key)] = value

    return {
        'apiVersion': 'v1',
        'kind': 'ConfigMap',
        'metadata': {
            'name': metadata['name'],
            'namespace': metadata.get('namespace'),
        },
        'data': data,
    }


def convert_secret_to_configmap(client, namespace: str, secret_name: str,
                                key_renames: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Copy a Secret into a ConfigMap of the same name in the cluster.

    The ConfigMap is a pure copy: an existing ConfigMap with that name is
    overwritten, not merged.

    Args:
        client: KubeClient (or compatible fake)
        namespace: Namespace of the Secret
        secret_name: Name of the Secret, reused for the ConfigMap
        key_renames: Optional key renames applied while copying

    Returns:
        The ConfigMap manifest that was written

    Raises:
        NotFoundError: If the Secret does not exist; nothing is written
    """
    secret = client.get_secret(namespace, secret_name)
    configmap = build_configmap_from_secret(secret, key_renames)
    configmap['metadata']['namespace'] = namespace
    client.apply_configmap(namespace, configmap)
    log_success(f"ConfigMap {namespace}/{secret_name} created from Secret")
    return configmap
