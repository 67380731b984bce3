"""ECR 仓库认证"""

from typing import Dict, Optional, Tuple

from loguru import logger

from ..build import version
from ..constants import (
    ECR_CRED_HELPER,
    ECR_NO_HELPER_VERSION,
    ENV_NAMES,
    REGISTRY_ECR_PUBLIC,
    REGISTRY_V1,
)
from .base import CredentialError
from .config import DockerConfig


def is_registry_public(registry: str) -> bool:
    """仓库地址以 public.ecr.aws 开头时为公共仓库"""
    return registry.startswith(REGISTRY_ECR_PUBLIC)


def needs_cred_helper(kaniko_version: Optional[str]) -> bool:
    """
    判断 kaniko 版本是否需要显式配置 ECR 凭证助手

    1.8.0 及以上版本会自动识别 ECR 仓库。版本号无法解析时按旧版本处理。

    Args:
        kaniko_version: kaniko 版本号，例如 "1.9.1" 或 "v1.6.0"

    Returns:
        bool: 是否需要凭证助手
    """
    if not kaniko_version:
        return True
    current = version.parse(kaniko_version) or version.parse(version.VERSION_PREFIX + kaniko_version)
    threshold = version.parse(version.VERSION_PREFIX + ECR_NO_HELPER_VERSION)
    if current is None or threshold is None:
        return True
    return current.as_tuple() < threshold.as_tuple()


def create_ecr_config(
    registry: str,
    docker_username: str = "",
    docker_password: str = "",
    access_key: str = "",
    secret_key: str = "",
    no_push: bool = False,
    kaniko_version: Optional[str] = None,
) -> Tuple[DockerConfig, Dict[str, str]]:
    """
    生成 ECR 推送所需的认证配置

    AWS 密钥不会写入当前进程的环境变量，而是作为执行器子进程的环境变量返回。

    Args:
        registry: ECR 仓库地址
        docker_username: Docker Hub 用户名，用于拉取基础镜像
        docker_password: Docker Hub 密码
        access_key: AWS access key
        secret_key: AWS secret key
        no_push: 是否只构建不推送
        kaniko_version: kaniko 版本号

    Returns:
        Tuple[DockerConfig, Dict[str, str]]: 认证配置和子进程环境变量

    Raises:
        CredentialError: 需要认证但未指定仓库地址时抛出
    """
    config = DockerConfig()
    env: Dict[str, str] = {}

    # 拉取基础镜像用的 Docker Hub 凭证不做校验，密码为空时照常写入
    if docker_username:
        config.set_auth(REGISTRY_V1, docker_username, docker_password)

    # 只有推送或显式提供了密钥时才配置认证
    if no_push and not access_key:
        return config, env

    if not registry:
        raise CredentialError("必须指定 ECR 仓库地址 (registry)")

    # 使用 IAM 角色时不需要密钥
    if access_key and secret_key:
        env[ENV_NAMES["aws_access_key"]] = access_key
        env[ENV_NAMES["aws_secret_key"]] = secret_key

    if needs_cred_helper(kaniko_version):
        logger.info(f"kaniko 版本低于 {ECR_NO_HELPER_VERSION}，配置 {ECR_CRED_HELPER} 凭证助手")
        config.set_cred_helper(REGISTRY_ECR_PUBLIC, ECR_CRED_HELPER)
        config.set_cred_helper(registry, ECR_CRED_HELPER)

    return config, env
