"""Constants for the BasicAuthenticator Operator."""

# API Group
API_GROUP = "authenticator.snappcloud.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"
PLURAL_BASIC_AUTHENTICATOR = "basicauthenticators"

# Resource Kinds
KIND_BASIC_AUTHENTICATOR = "BasicAuthenticator"
KIND_SECRET = "Secret"
KIND_CONFIG_MAP = "ConfigMap"
KIND_DEPLOYMENT = "Deployment"

# Modes
MODE_STANDALONE = "standalone"
MODE_SIDECAR = "sidecar"
MODES = (MODE_STANDALONE, MODE_SIDECAR)

# Labels
LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"
LABEL_NAME = "app.kubernetes.io/name"
LABEL_INSTANCE = f"{API_GROUP}/instance"
LABEL_COMPONENT = f"{API_GROUP}/component"

# Annotations
ANNOTATION_INJECTED_BY = f"{API_GROUP}/injected-by"
ANNOTATION_CONFIG_HASH = f"{API_GROUP}/config-hash"

# Field Manager
FIELD_MANAGER = "basic-auth-operator"

# Proxy layout
PROXY_APP_NAME = "basic-auth-proxy"
CONFIG_KEY = "default.conf"
CONFIG_MOUNT_PATH = "/etc/nginx/conf.d"
CREDENTIALS_MOUNT_PATH = "/etc/nginx/auth"
HTPASSWD_KEY = "htpasswd"
USERNAME_KEY = "username"
PASSWORD_KEY = "password"
CONFIG_VOLUME_NAME = "basic-auth-config"
CREDENTIALS_VOLUME_NAME = "basic-auth-credentials"

# Spec defaults
DEFAULT_PROXY_PORT = 80
DEFAULT_REPLICAS = 1
DEFAULT_REALM = "Restricted"

# Condition Types
COND_READY = "Ready"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_SECRET_CREATED = "SecretCreated"
EVENT_REASON_CONFIG_CREATED = "ConfigCreated"
EVENT_REASON_CONFIG_UPDATED = "ConfigUpdated"
EVENT_REASON_DEPLOYMENT_CREATED = "DeploymentCreated"
EVENT_REASON_DEPLOYMENT_UPDATED = "DeploymentUpdated"
EVENT_REASON_SIDECAR_INJECTED = "SidecarInjected"
EVENT_REASON_REQUEUED = "Requeued"

# Reconcile actions
ACTION_SECRET_CREATED = "secret_created"
ACTION_SECRET_ADOPTED = "secret_adopted"
ACTION_CONFIG_CREATED = "config_created"
ACTION_CONFIG_UPDATED = "config_updated"
ACTION_DEPLOYMENT_CREATED = "deployment_created"
ACTION_DEPLOYMENT_UPDATED = "deployment_updated"
ACTION_SIDECAR_INJECTED = "sidecar_injected"
ACTION_STATUS_UPDATED = "status_updated"


def secret_name_for(name: str) -> str:
    """Deterministic name of the credential secret created for a resource."""
    return f"{name}-credentials"


def config_map_name_for(name: str) -> str:
    """Deterministic name of the proxy configuration artifact."""
    return f"{name}-nginx-config"


def deployment_name_for(name: str) -> str:
    """Deterministic name of the standalone proxy deployment."""
    return f"{name}-nginx"
