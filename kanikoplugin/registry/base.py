"""镜像仓库认证基础类型定义"""

from dataclasses import dataclass

from ..build.base import PluginError


class CredentialError(PluginError):
    """仓库凭证错误"""
    pass


class ConfigWriteError(PluginError):
    """认证配置文件写入错误"""
    pass


@dataclass(frozen=True)
class RegistryCredential:
    """单个仓库的用户名密码"""

    registry: str
    username: str = ""
    password: str = ""
