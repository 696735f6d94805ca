"""Typed configuration for manifest rendering"""

from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from src.core.exceptions import ManifestError


class CloudSQLConfig(BaseModel):
    """External database reached through a cloud-sql-proxy sidecar"""

    instance: str = Field(..., min_length=1, description="Cloud SQL instance name")
    proxy_secret_ref: str = Field(
        ..., min_length=1, description="Secret holding the proxy credentials"
    )
    database_secret_ref: str = Field(
        ..., min_length=1, description="Secret holding 'user' and 'password' keys"
    )


class ResourceRequests(BaseModel):
    cpu: str = Field(default="1m", description="CPU request")
    memory: str = Field(default="30Mi", description="Memory request")
    cpu_limit: Optional[str] = Field(None, description="CPU limit")
    memory_limit: Optional[str] = Field(None, description="Memory limit")


class OpenFGAConfig(BaseModel):
    enabled: bool = Field(default=False, description="Render OpenFGA resources")
    cloud_sql: Optional[CloudSQLConfig] = Field(
        None, description="External database parameters"
    )
    image_tag: str = Field(default="v1.3.1", description="OpenFGA image tag")
    resources: ResourceRequests = Field(default_factory=ResourceRequests)
    replicas: int = Field(default=1, ge=1, description="Deployment replicas")


class RenderContext(BaseModel):
    namespace: str = Field(default="default", description="Target namespace")
    repository: str = Field(
        default="docker.io", description="Registry that mirrors third-party images"
    )
    labels: Dict[str, str] = Field(
        default_factory=dict, description="Extra labels for every resource"
    )
    annotations: Dict[str, str] = Field(
        default_factory=dict, description="Extra annotations for every resource"
    )
    openfga: Optional[OpenFGAConfig] = Field(
        None, description="OpenFGA settings; absent means disabled"
    )


def load_render_context(path: Union[str, Path]) -> RenderContext:
    """Load a render context from a YAML file"""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ManifestError(f"Cannot read manifest config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Manifest config {path} is not valid YAML: {e}") from e

    try:
        return RenderContext.model_validate(data)
    except ValidationError as e:
        raise ManifestError(
            f"Invalid manifest config {path}",
            {"errors": [err["msg"] for err in e.errors()]},
        ) from e
