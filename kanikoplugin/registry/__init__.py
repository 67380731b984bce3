"""镜像仓库认证模块

该子包负责生成 kaniko 执行器读取的仓库认证配置。
"""

from .base import ConfigWriteError, CredentialError, RegistryCredential
from .config import DockerConfig, create_docker_config, encode_auth, normalize_registry
from .ecr import create_ecr_config, is_registry_public, needs_cred_helper
from .gcr import setup_gcr_auth

__all__ = [
    "ConfigWriteError",
    "CredentialError",
    "RegistryCredential",
    "DockerConfig",
    "create_docker_config",
    "encode_auth",
    "normalize_registry",
    "create_ecr_config",
    "is_registry_public",
    "needs_cred_helper",
    "setup_gcr_auth",
]
