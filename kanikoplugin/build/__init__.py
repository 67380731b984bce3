"""镜像构建相关功能模块

该子包包含标签计算、执行器调用和构建结果输出等功能。
"""

from .base import BuildError, BuildResult, PluginError, TagError
from .executor import Artifact, Build, Plugin
from .output import (
    OutputError,
    build_artifact,
    digest_file_name,
    read_digest_file,
    write_artifact_file,
    write_output_file,
)
from .tags import auto_tags, compute_tags, expand, resolve_tags, should_auto_tag
from .utils import build_repo, image_reference, is_docker_hub

__all__ = [
    "BuildError",
    "BuildResult",
    "PluginError",
    "TagError",
    "Artifact",
    "Build",
    "Plugin",
    "OutputError",
    "build_artifact",
    "digest_file_name",
    "read_digest_file",
    "write_artifact_file",
    "write_output_file",
    "auto_tags",
    "compute_tags",
    "expand",
    "resolve_tags",
    "should_auto_tag",
    "build_repo",
    "image_reference",
    "is_docker_hub",
]
