"""
Manifest Writer Module

YAML serialization for emitted manifests. Output is rendered completely in
memory and then swapped into place, so a failed run never leaves a
truncated or non-YAML file behind.
"""

import os
import re
import tempfile
from typing import Any, Dict, List

import yaml

from .errors import SerializationError

YAML_SEPARATOR = '---\n'

# The API server reports unset timestamps as null; kubectl rejects them on apply
CREATION_TIMESTAMP_NULL_RE = re.compile(r'^\s*creationTimestamp: null\s*$')


class OrderedDumper(yaml.SafeDumper):
    """YAML dumper that preserves dictionary order"""
    pass


def dict_representer(dumper, data):
    """Represent dict as ordered mapping"""
    return dumper.represent_mapping(
        yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
        data.items()
    )


def tuple_representer(dumper, data):
    """Represent tuple as a plain sequence"""
    return dumper.represent_sequence(
        yaml.resolver.BaseResolver.DEFAULT_SEQUENCE_TAG,
        list(data)
    )


OrderedDumper.add_representer(dict, dict_representer)
OrderedDumper.add_representer(tuple, tuple_representer)


def to_yaml(data: Any) -> str:
    """Serialize one document, dropping 'creationTimestamp: null' lines"""
    text = yaml.dump(data, Dumper=OrderedDumper, default_flow_style=False, sort_keys=False, width=float('inf'))
    lines = [line for line in text.split('\n') if not CREATION_TIMESTAMP_NULL_RE.match(line)]
    return '\n'.join(lines)


def render_documents(documents: List[Dict[str, Any]]) -> str:
    """Render documents as one multi-document YAML string"""
    return YAML_SEPARATOR.join(to_yaml(doc) for doc in documents)


def write_yaml_documents(path: str, documents: List[Dict[str, Any]]) -> str:
    """Write one or more documents to path atomically.

    Args:
        path: Target file
        documents: Manifests to write, separated by '---' lines

    Returns:
        The rendered YAML text

    Raises:
        SerializationError: If rendering or writing fails; the target file
                            is left as it was
    """
    try:
        content = render_documents(documents)
    except yaml.YAMLError as e:
        raise SerializationError(path, e) from e

    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        with tempfile.NamedTemporaryFile(
                'w', dir=directory, prefix=f'.{os.path.basename(path)}.', suffix='.tmp', delete=False) as f:
            tmp_path = f.name
            f.write(content)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise SerializationError(path, e) from e

    return content


def write_yaml(path: str, data: Dict[str, Any]) -> str:
    """Write a single manifest to path atomically"""
    return write_yaml_documents(path, [data])
