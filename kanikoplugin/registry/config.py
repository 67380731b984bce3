"""kaniko 认证配置 (config.json) 生成"""

import base64
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Union

from loguru import logger

from ..constants import DOCKER_CONFIG_FILE, REGISTRY_V1, UNSUPPORTED_V2_REGISTRIES
from .base import ConfigWriteError, CredentialError, RegistryCredential


def encode_auth(username: str, password: str) -> str:
    """将用户名密码编码为 base64("username:password")"""
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def normalize_registry(registry: str) -> str:
    """
    将不支持的 v2 Docker Hub 地址替换为 v1 地址

    Args:
        registry: 仓库地址

    Returns:
        str: kaniko 可用的仓库地址
    """
    if registry in UNSUPPORTED_V2_REGISTRIES:
        logger.warning(
            f"kaniko 不支持 Docker v2 仓库 '{registry}'，"
            "参考 https://github.com/GoogleContainerTools/kaniko/issues/1209"
        )
        logger.warning(f"改用 v1 仓库: {REGISTRY_V1}")
        return REGISTRY_V1
    return registry


class DockerConfig:
    """认证配置构建器，生成 kaniko 读取的 config.json"""

    auths: Dict[str, str]
    cred_helpers: Dict[str, str]

    def __init__(self) -> None:
        """初始化空的认证配置"""
        self.auths = {}
        self.cred_helpers = {}

    def set_auth(self, registry: str, username: str, password: str) -> None:
        """
        直接写入仓库认证信息，不做校验

        Args:
            registry: 仓库地址
            username: 用户名
            password: 密码
        """
        self.auths[registry] = encode_auth(username, password)

    def set_cred_helper(self, registry: str, helper: str) -> None:
        """
        为仓库设置凭证助手

        Args:
            registry: 仓库地址
            helper: 凭证助手名称，例如 "ecr-login"
        """
        if not registry:
            return
        self.cred_helpers[registry] = helper

    def add(self, credential: RegistryCredential) -> None:
        """
        添加一个仓库凭证

        仓库地址为空时直接跳过，方便省略可选的基础镜像仓库。

        Args:
            credential: 仓库凭证

        Raises:
            CredentialError: 缺少用户名或密码时抛出
        """
        if not credential.registry:
            return

        registry = normalize_registry(credential.registry)
        if not credential.username:
            raise CredentialError(f"仓库 {registry} 必须指定用户名 (username)")
        if not credential.password:
            raise CredentialError(f"仓库 {registry} 必须指定密码 (password)")

        self.set_auth(registry, credential.username, credential.password)
        logger.debug(f"已添加仓库认证: {registry}")

    def add_credentials(self, credentials: Iterable[RegistryCredential]) -> None:
        """依次添加多个仓库凭证"""
        for credential in credentials:
            self.add(credential)

    def to_dict(self) -> Dict[str, Any]:
        """
        转换为 config.json 的结构

        Returns:
            Dict[str, Any]: {"auths": {...}, "credHelpers": {...}}，credHelpers 为空时省略
        """
        data: Dict[str, Any] = {
            "auths": {registry: {"auth": auth} for registry, auth in self.auths.items()}
        }
        if self.cred_helpers:
            data["credHelpers"] = dict(self.cred_helpers)
        return data

    def finalize(self) -> Dict[str, Any]:
        """完成配置，返回写入 config.json 的内容"""
        return self.to_dict()

    def to_json(self) -> str:
        return json.dumps(self.finalize())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DockerConfig":
        """从 config.json 的结构还原配置"""
        config = cls()
        for registry, entry in (data.get("auths") or {}).items():
            config.auths[registry] = entry.get("auth", "")
        config.cred_helpers.update(data.get("credHelpers") or {})
        return config

    def write(self, directory: Union[str, Path]) -> Path:
        """
        写入 <directory>/config.json，目录不存在时自动创建

        Args:
            directory: 配置目录

        Returns:
            Path: 配置文件路径

        Raises:
            ConfigWriteError: 创建目录或写入文件失败时抛出
        """
        config_dir = Path(directory)
        try:
            config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigWriteError(f"创建目录 {config_dir} 失败: {e}") from e

        config_file = config_dir / DOCKER_CONFIG_FILE
        try:
            config_file.write_text(self.to_json(), encoding="utf-8")
        except OSError as e:
            raise ConfigWriteError(f"写入认证配置文件 {config_file} 失败: {e}") from e

        logger.info(f"已生成认证配置文件 {config_file}")
        return config_file


def create_docker_config(
    credentials: Iterable[RegistryCredential], directory: Union[str, Path]
) -> DockerConfig:
    """
    根据凭证列表生成并写入认证配置

    Args:
        credentials: 仓库凭证列表
        directory: 配置目录

    Returns:
        DockerConfig: 生成的配置
    """
    config = DockerConfig()
    config.add_credentials(credentials)
    config.write(directory)
    return config
