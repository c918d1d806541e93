"""Builders for the objects the operator manages."""

from .config import build_config_map, config_data_from_spec, config_hash, render_nginx_config
from .deployment import build_deployment
from .proxy import build_proxy_container, build_proxy_volumes
from .secret import build_credentials_secret

__all__ = [
    "build_config_map",
    "build_credentials_secret",
    "build_deployment",
    "build_proxy_container",
    "build_proxy_volumes",
    "config_data_from_spec",
    "config_hash",
    "render_nginx_config",
]
