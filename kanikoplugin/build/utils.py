"""镜像名称工具函数"""

from docker.auth import INDEX_NAME, resolve_index_name

from ..constants import UNSUPPORTED_V2_REGISTRIES


def is_docker_hub(registry: str) -> bool:
    """
    判断仓库地址是否指向 Docker Hub

    Args:
        registry: 仓库地址，可以是 "https://index.docker.io/v1/"、"docker.io" 等形式

    Returns:
        bool: 是否为 Docker Hub
    """
    if not registry:
        return True
    if registry in UNSUPPORTED_V2_REGISTRIES:
        return True
    return resolve_index_name(registry) == INDEX_NAME


def build_repo(registry: str, repo: str) -> str:
    """
    拼接推送用的镜像仓库名

    Docker Hub 不需要仓库前缀；repo 已经带有仓库前缀时保持不变。

    Args:
        registry: 仓库地址
        repo: 镜像仓库名

    Returns:
        str: 完整的镜像仓库名
    """
    if is_docker_hub(registry):
        return repo
    if repo.startswith(registry):
        return repo
    return f"{registry.rstrip('/')}/{repo}"


def image_reference(repo: str, tag: str) -> str:
    """拼接 "仓库名:标签" 格式的镜像引用"""
    return f"{repo}:{tag}"
