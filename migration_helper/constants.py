"""Constants for migration-helper

Centralized location for names, keys and defaults shared by the parser,
the input builder and the manifest emitters.
"""

# Legacy StatefulSet layout (public cockroachdb Helm chart)
CRDB_CONTAINER_NAME = 'db'
LOG_CONFIG_VOLUME_NAME = 'log-config'
CERTS_VOLUME_NAME = 'certs'

# Logging configuration keys: the public chart stores the config under
# log-config.yaml in a Secret, the operator reads logs.yaml from a ConfigMap
HELM_LOG_CONFIG_KEY = 'log-config.yaml'
OPERATOR_LOG_CONFIG_KEY = 'logs.yaml'
LOG_CONFIG_KEY_RENAMES = {HELM_LOG_CONFIG_KEY: OPERATOR_LOG_CONFIG_KEY}

# Start flags
JOIN_FLAG = '--join'
PORT_FLAG = '--port'
HTTP_PORT_FLAG = '--http-port'
CERTS_DIR_FLAG = '--certs-dir'
LOGTOSTDERR_FLAG = '--logtostderr'
INSECURE_FLAG = '--insecure'
LOCALITY_FLAG = '--locality'

# Flags promoted to first-class record fields or otherwise regenerated by the
# operator; these never appear in MigrationRecord.flags
EXCLUDED_FLAGS = {
    JOIN_FLAG,
    PORT_FLAG,
    HTTP_PORT_FLAG,
    CERTS_DIR_FLAG,
    LOGTOSTDERR_FLAG,
    INSECURE_FLAG,
    LOCALITY_FLAG,
}

# Ports
DEFAULT_SQL_PORT = 26257
DEFAULT_GRPC_PORT = 26258
DEFAULT_HTTP_PORT = 8080
GRPC_PORT_NAME = 'grpc'
SQL_PORT_NAME = 'sql'
PORT_PROTOCOL = 'TCP'

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

# Operator custom resources
CRDB_API_GROUP = 'crdb.cockroachlabs.com'
CRDB_API_VERSION = f'{CRDB_API_GROUP}/v1alpha1'
CRDB_NODE_KIND = 'CrdbNode'
CRDB_NODE_FINALIZER = 'crdbnode.crdb.cockroachlabs.com/finalizer'
CRDB_CLUSTER_LABEL = 'crdb.cockroachlabs.com/cluster'
CLOUD_PROVIDER_ANNOTATION = 'crdb.cockroachlabs.com/cloudProvider'
DATA_STORE_CLAIM_NAME = 'datadir'
NODE_SERVICE_ACCOUNT = 'cockroachdb'

# Helm release ownership metadata
HELM_RELEASE_NAME_ANNOTATION = 'meta.helm.sh/release-name'
HELM_RELEASE_NAMESPACE_ANNOTATION = 'meta.helm.sh/release-namespace'
MANAGED_BY_LABEL = 'app.kubernetes.io/managed-by'
MANAGED_BY_HELM = 'Helm'

# Output files
RBAC_YAML = 'rbac.yaml'
PUBLIC_SERVICE_YAML = 'public-service.yaml'
HELM_VALUES_YAML = 'values.yaml'
CRDB_NODE_YAML = 'crdbnode-{index}.yaml'

# Public Service handling
SERVICE_MODE_FILE = 'file'
SERVICE_MODE_APPLY = 'apply'
SERVICE_MODES = (SERVICE_MODE_FILE, SERVICE_MODE_APPLY)
