"""OpenFGA workload and service descriptors.

``render_openfga`` is deterministic: the same context always yields the
same descriptors, and ``render_yaml`` the same bytes.
"""

from typing import Any, Dict, List

import yaml

from src.manifests.common import (
    AFFINITY_LABEL_META,
    DEPLOYMENT_STRATEGY,
    SYSTEM_NODE_CRITICAL,
    TYPE_META_DEPLOYMENT,
    custom_labels,
    default_labels,
    generate_service,
    image_name,
    node_affinity,
    object_meta,
)
from src.manifests.models import CloudSQLConfig, OpenFGAConfig, RenderContext

COMPONENT = "openfga"
CONTAINER_NAME = "openfga"

REGISTRY_REPO = "openfga"
REGISTRY_IMAGE = "openfga"

CONTAINER_GRPC_NAME = "grpc"
CONTAINER_GRPC_PORT = 8081
CONTAINER_HTTP_NAME = "http"
CONTAINER_HTTP_PORT = 8080
CONTAINER_PLAYGROUND_NAME = "playground"
CONTAINER_PLAYGROUND_PORT = 3000

CLOUD_SQL_PROXY_PORT = 3306
CLOUD_SQL_IMAGE_REPO = "gcr.io/cloudsql-docker"
CLOUD_SQL_IMAGE_NAME = "gce-proxy"
CLOUD_SQL_IMAGE_VERSION = "1.33.1"

NON_ROOT_UID = 65532


def _cloud_sql_proxy_container(cloud_sql: CloudSQLConfig) -> Dict[str, Any]:
    return {
        "name": "cloud-sql-proxy",
        "securityContext": {
            "privileged": False,
            "runAsNonRoot": False,
            "allowPrivilegeEscalation": False,
        },
        "image": image_name(
            CLOUD_SQL_IMAGE_REPO, CLOUD_SQL_IMAGE_NAME, CLOUD_SQL_IMAGE_VERSION
        ),
        "command": [
            "/cloud_sql_proxy",
            "-dir=/cloudsql",
            f"-instances={cloud_sql.instance}=tcp:0.0.0.0:{CLOUD_SQL_PROXY_PORT}",
            "-credential_file=/credentials/credentials.json",
        ],
        "ports": [{"containerPort": CLOUD_SQL_PROXY_PORT}],
        "volumeMounts": [
            {"mountPath": "/cloudsql", "name": "cloudsql"},
            {"mountPath": "/credentials", "name": "gcloud-sql-token"},
        ],
    }


def _cloud_sql_volumes(cloud_sql: CloudSQLConfig) -> List[Dict[str, Any]]:
    return [
        {"name": "cloudsql", "emptyDir": {}},
        {
            "name": "gcloud-sql-token",
            "secret": {"secretName": cloud_sql.proxy_secret_ref},
        },
    ]


def _datastore_env(cloud_sql: CloudSQLConfig) -> List[Dict[str, Any]]:
    # The proxy sidecar listens on localhost
    db_host = "localhost"

    def secret_ref(key: str) -> Dict[str, Any]:
        return {
            "secretKeyRef": {"name": cloud_sql.database_secret_ref, "key": key}
        }

    return [
        {"name": "OPENFGA_DATASTORE_ENGINE", "value": "mysql"},
        {"name": "DB_PASSWORD", "valueFrom": secret_ref("password")},
        {"name": "DB_USERNAME", "valueFrom": secret_ref("user")},
        {
            "name": "OPENFGA_DATASTORE_URI",
            "value": (
                f"$(DB_USERNAME):$(DB_PASSWORD)@tcp({db_host}:{CLOUD_SQL_PROXY_PORT})"
                f"/{cloud_sql.instance}?parseTime=true"
            ),
        },
    ]


def _health_probe() -> Dict[str, Any]:
    return {
        "httpGet": {
            "path": "/healthz",
            "port": CONTAINER_HTTP_PORT,
            "scheme": "HTTP",
        },
        "failureThreshold": 3,
        "successThreshold": 1,
        "timeoutSeconds": 1,
    }


def _resources(cfg: OpenFGAConfig) -> Dict[str, Any]:
    resources: Dict[str, Any] = {
        "requests": {"cpu": cfg.resources.cpu, "memory": cfg.resources.memory}
    }
    limits = {}
    if cfg.resources.cpu_limit:
        limits["cpu"] = cfg.resources.cpu_limit
    if cfg.resources.memory_limit:
        limits["memory"] = cfg.resources.memory_limit
    if limits:
        resources["limits"] = limits
    return resources


def _openfga_container(ctx: RenderContext, cfg: OpenFGAConfig) -> Dict[str, Any]:
    container: Dict[str, Any] = {
        "name": CONTAINER_NAME,
        "image": image_name(
            f"{ctx.repository.rstrip('/')}/{REGISTRY_REPO}", REGISTRY_IMAGE, cfg.image_tag
        ),
        "imagePullPolicy": "IfNotPresent",
        "args": ["run", "--log-format=json", "--log-level=warn"],
        "ports": [
            {
                "containerPort": CONTAINER_GRPC_PORT,
                "name": CONTAINER_GRPC_NAME,
                "protocol": "TCP",
            },
            {
                "containerPort": CONTAINER_HTTP_PORT,
                "name": CONTAINER_HTTP_NAME,
                "protocol": "TCP",
            },
            {
                "containerPort": CONTAINER_PLAYGROUND_PORT,
                "name": CONTAINER_PLAYGROUND_NAME,
                "protocol": "TCP",
            },
        ],
        "resources": _resources(cfg),
        "securityContext": {
            "runAsGroup": NON_ROOT_UID,
            "runAsNonRoot": True,
            "runAsUser": NON_ROOT_UID,
        },
        "livenessProbe": _health_probe(),
        "readinessProbe": _health_probe(),
    }
    if cfg.cloud_sql is not None:
        container["env"] = _datastore_env(cfg.cloud_sql)
    return container


def deployment(ctx: RenderContext) -> List[Dict[str, Any]]:
    cfg = ctx.openfga
    if cfg is None or not cfg.enabled:
        return []

    labels = custom_labels(ctx, COMPONENT)
    containers: List[Dict[str, Any]] = []
    volumes: List[Dict[str, Any]] = []

    if cfg.cloud_sql is not None:
        containers.append(_cloud_sql_proxy_container(cfg.cloud_sql))
        volumes.extend(_cloud_sql_volumes(cfg.cloud_sql))

    containers.append(_openfga_container(ctx, cfg))

    pod_spec: Dict[str, Any] = {
        "affinity": node_affinity(AFFINITY_LABEL_META),
        "priorityClassName": SYSTEM_NODE_CRITICAL,
        "serviceAccountName": COMPONENT,
        "enableServiceLinks": False,
        "dnsPolicy": "ClusterFirst",
        "restartPolicy": "Always",
        "terminationGracePeriodSeconds": 30,
        "securityContext": {"runAsNonRoot": False},
        "containers": containers,
    }
    if volumes:
        pod_spec["volumes"] = volumes

    return [{
        **TYPE_META_DEPLOYMENT,
        "metadata": object_meta(ctx, COMPONENT, labels),
        "spec": {
            "selector": {"matchLabels": default_labels(COMPONENT)},
            "replicas": cfg.replicas,
            "strategy": DEPLOYMENT_STRATEGY,
            "template": {
                "metadata": object_meta(ctx, COMPONENT, labels),
                "spec": pod_spec,
            },
        },
    }]


def service(ctx: RenderContext) -> List[Dict[str, Any]]:
    cfg = ctx.openfga
    if cfg is None or not cfg.enabled:
        return []

    return [generate_service(ctx, COMPONENT, [{
        "name": CONTAINER_HTTP_NAME,
        "container_port": CONTAINER_HTTP_PORT,
        "service_port": CONTAINER_HTTP_PORT,
    }])]


def render_openfga(ctx: RenderContext) -> List[Dict[str, Any]]:
    """Render every OpenFGA resource, or nothing when the feature is off"""
    return deployment(ctx) + service(ctx)


def render_yaml(objects: List[Dict[str, Any]]) -> str:
    return yaml.safe_dump_all(objects, default_flow_style=False, sort_keys=True)
