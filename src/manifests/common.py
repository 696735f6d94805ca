"""Helpers shared by component renderers"""

from typing import Any, Dict, List

from src.manifests.models import RenderContext

TYPE_META_DEPLOYMENT = {"apiVersion": "apps/v1", "kind": "Deployment"}
TYPE_META_SERVICE = {"apiVersion": "v1", "kind": "Service"}

DEPLOYMENT_STRATEGY = {
    "type": "RollingUpdate",
    "rollingUpdate": {"maxSurge": 1, "maxUnavailable": 0},
}

AFFINITY_LABEL_META = "patstore.io/workload_meta"

SYSTEM_NODE_CRITICAL = "system-node-critical"


def default_labels(component: str) -> Dict[str, str]:
    return {"app": "patstore", "component": component}


def custom_labels(ctx: RenderContext, component: str) -> Dict[str, str]:
    labels = dict(ctx.labels)
    labels.update(default_labels(component))
    return labels


def object_meta(
    ctx: RenderContext, name: str, labels: Dict[str, str]
) -> Dict[str, Any]:
    """Metadata block; annotations are omitted when none are configured"""
    meta: Dict[str, Any] = {
        "name": name,
        "namespace": ctx.namespace,
        "labels": labels,
    }
    if ctx.annotations:
        meta["annotations"] = dict(ctx.annotations)
    return meta


def image_name(repository: str, name: str, tag: str) -> str:
    return f"{repository.rstrip('/')}/{name}:{tag}"


def node_affinity(label: str) -> Dict[str, Any]:
    return {
        "nodeAffinity": {
            "requiredDuringSchedulingIgnoredDuringExecution": {
                "nodeSelectorTerms": [{
                    "matchExpressions": [{"key": label, "operator": "Exists"}],
                }],
            },
        },
    }


def generate_service(
    ctx: RenderContext, component: str, ports: List[Dict[str, Any]]
) -> Dict[str, Any]:
    """Build a ClusterIP service selecting the component's pods.

    Each port entry needs ``name``, ``container_port`` and ``service_port``.
    """
    return {
        **TYPE_META_SERVICE,
        "metadata": object_meta(ctx, component, custom_labels(ctx, component)),
        "spec": {
            "type": "ClusterIP",
            "selector": default_labels(component),
            "ports": [
                {
                    "name": port["name"],
                    "protocol": "TCP",
                    "port": port["service_port"],
                    "targetPort": port["container_port"],
                }
                for port in ports
            ],
        },
    }
