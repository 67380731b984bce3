"""构建结果输出文件：产物文件、dotenv 输出文件和 digest 文件"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from dotenv import dotenv_values, set_key
from loguru import logger

from ..constants import (
    ARTIFACT_KIND_DOCKER_V1,
    DEFAULT_PATHS,
    OUTPUT_DIGEST_KEY,
    OUTPUT_TAR_PATH_KEY,
    ArtifactImage,
    DockerArtifact,
)
from .base import PluginError

PathLike = Union[str, Path]


class OutputError(PluginError):
    """输出文件写入错误"""
    pass


def build_artifact(
    registry_type: str, registry_url: str, repo: str, digest: str, tags: Sequence[str]
) -> DockerArtifact:
    """
    构造产物文件内容

    Args:
        registry_type: 仓库类型，例如 "Docker"、"ECR"
        registry_url: 仓库地址
        repo: 镜像仓库名
        digest: 镜像 digest
        tags: 推送的标签

    Returns:
        DockerArtifact: 产物文件内容
    """
    images: List[ArtifactImage] = [
        {"image": f"{repo}:{tag}", "digest": digest} for tag in tags
    ]
    return {
        "kind": ARTIFACT_KIND_DOCKER_V1,
        "data": {
            "registryType": registry_type,
            "registryUrl": registry_url,
            "images": images,
        },
    }


def write_artifact_file(
    artifact_file: PathLike,
    registry_type: str,
    registry_url: str,
    repo: str,
    digest: str,
    tags: Sequence[str],
) -> Path:
    """
    写入产物文件，目录不存在时自动创建

    Raises:
        OutputError: 写入失败时抛出
    """
    path = Path(artifact_file)
    artifact = build_artifact(registry_type, registry_url, repo, digest, tags)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(f"创建产物文件目录 {path.parent} 失败: {e}") from e
    try:
        path.write_text(json.dumps(artifact, indent="\t"), encoding="utf-8")
    except OSError as e:
        raise OutputError(f"写入产物文件 {path} 失败: {e}") from e

    logger.info(f"已写入产物文件 {path}")
    return path


def write_output_file(output_file: PathLike, digest: str, tar_path: str = "") -> Dict[str, str]:
    """
    以 dotenv 格式写入输出文件

    Args:
        output_file: 输出文件路径
        digest: 镜像 digest
        tar_path: 镜像 tar 包路径

    Returns:
        Dict[str, str]: 写入的键值

    Raises:
        OutputError: 没有可写入的值或写入失败时抛出
    """
    values: Dict[str, str] = {}
    if digest:
        values[OUTPUT_DIGEST_KEY] = digest
    if tar_path:
        values[OUTPUT_TAR_PATH_KEY] = tar_path
    else:
        logger.debug("tar_path 为空，跳过")

    if not values:
        raise OutputError("没有可写入输出文件的值")

    path = Path(output_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
        for key, value in values.items():
            set_key(str(path), key, value)
    except OSError as e:
        raise OutputError(f"写入输出文件 {path} 失败: {e}") from e

    written = dotenv_values(path)
    for key, value in values.items():
        if written.get(key) != value:
            raise OutputError(f"输出文件 {path} 校验失败: {key}")

    logger.debug(f"已写入输出文件 {path}: {values}")
    return values


def digest_file_name(digest_file: str = "", output_file: str = "") -> str:
    """
    确定 digest 文件路径

    两者都未指定时返回空字符串，表示不需要 digest 文件。

    Args:
        digest_file: 指定的 digest 文件路径
        output_file: 输出文件路径

    Returns:
        str: digest 文件路径

    Raises:
        OutputError: 创建目录失败时抛出
    """
    if not digest_file and not output_file:
        return ""

    path = Path(digest_file or DEFAULT_PATHS["digest_file"])
    if not path.exists():
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"创建 digest 文件目录 {path.parent} 失败: {e}") from e
    return str(path)


def read_digest_file(digest_file: PathLike) -> Optional[str]:
    """
    读取 digest 文件

    Returns:
        Optional[str]: digest 内容，读取失败时返回None
    """
    try:
        return Path(digest_file).read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.warning(f"读取 digest 文件失败: {e}")
        return None
