"""Kubernetes manifest rendering for the OpenFGA component."""
from src.manifests.models import (CloudSQLConfig, OpenFGAConfig,
                                  RenderContext, ResourceRequests,
                                  load_render_context)
from src.manifests.openfga import render_openfga, render_yaml

__all__ = [
    "CloudSQLConfig",
    "OpenFGAConfig",
    "RenderContext",
    "ResourceRequests",
    "load_render_context",
    "render_openfga",
    "render_yaml",
]
