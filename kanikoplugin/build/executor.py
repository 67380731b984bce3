"""kaniko 执行器调用"""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from loguru import logger

from ..constants import DEFAULT_PATHS, REGISTRY_TYPES
from ..utils import build_args_from_env, run_command
from .base import BuildError, BuildResult
from .output import (
    OutputError,
    digest_file_name,
    read_digest_file,
    write_artifact_file,
    write_output_file,
)
from .tags import resolve_tags
from .utils import image_reference

Runner = Callable[..., int]


@dataclass
class Build:
    """一次 kaniko 构建的参数"""

    repo: str
    dockerfile: str = "Dockerfile"
    context: str = "."
    tags: List[str] = field(default_factory=list)
    auto_tag: bool = False
    auto_tag_suffix: str = ""
    expand_tag: bool = False
    commit_ref: str = ""
    repo_branch: str = ""
    args: List[str] = field(default_factory=list)
    args_from_env: List[str] = field(default_factory=list)
    target: str = ""
    labels: List[str] = field(default_factory=list)
    mirrors: List[str] = field(default_factory=list)
    skip_tls_verify: bool = False
    snapshot_mode: str = ""
    enable_cache: bool = False
    cache_repo: str = ""
    cache_ttl: int = 0
    digest_file: str = ""
    no_push: bool = False
    verbosity: str = ""
    platform: str = ""
    skip_unused_stages: bool = False
    tar_path: str = ""


@dataclass
class Artifact:
    """产物文件和输出文件参数"""

    repo: str = ""
    registry: str = ""
    artifact_file: str = ""
    registry_type: str = REGISTRY_TYPES["docker"]
    output_file: str = ""


class Plugin:
    """kaniko 构建插件，负责组装参数、调用执行器并写出结果文件"""

    def __init__(
        self,
        build: Build,
        artifact: Optional[Artifact] = None,
        env: Optional[Mapping[str, str]] = None,
        executor: str = DEFAULT_PATHS["executor"],
        runner: Runner = run_command,
    ) -> None:
        """
        初始化构建插件

        Args:
            build: 构建参数
            artifact: 产物文件参数
            env: 传给执行器子进程的额外环境变量，例如云厂商凭证
            executor: 执行器路径
            runner: 命令执行函数
        """
        self.build = build
        self.artifact = artifact or Artifact()
        self.env = dict(env or {})
        self.executor = executor
        self.runner = runner

    def resolve_tags(self) -> List[str]:
        """计算本次构建要推送的标签"""
        return resolve_tags(
            self.build.tags,
            auto_tag=self.build.auto_tag,
            expand_tag=self.build.expand_tag,
            commit_ref=self.build.commit_ref,
            default_branch=self.build.repo_branch,
            suffix=self.build.auto_tag_suffix,
        )

    def validate(self) -> None:
        """
        检查构建参数

        Raises:
            BuildError: 未指定仓库名或 Dockerfile 不存在时抛出
        """
        if not self.build.repo:
            raise BuildError("必须指定推送镜像的仓库名 (repo)")
        if not Path(self.build.dockerfile).exists():
            raise BuildError(f"Dockerfile不存在: {self.build.dockerfile}")

    def command_args(self, tags: List[str], environ: Optional[Mapping[str, str]] = None) -> List[str]:
        """
        组装执行器命令行参数

        Args:
            tags: 要推送的标签
            environ: 读取 args_from_env 时使用的环境变量

        Returns:
            List[str]: 完整命令，第一个元素为执行器路径
        """
        b = self.build
        args = [
            self.executor,
            f"--dockerfile={b.dockerfile}",
            f"--context=dir://{b.context}",
        ]

        for tag in tags:
            args.append(f"--destination={image_reference(b.repo, tag)}")
        for arg in b.args:
            args.append(f"--build-arg={arg}")
        for arg in build_args_from_env(b.args_from_env, environ):
            args.append(f"--build-arg={arg}")
        for label in b.labels:
            args.append(f"--label={label}")

        if b.target:
            args.append(f"--target={b.target}")
        if b.skip_tls_verify:
            args.append("--skip-tls-verify=true")
        if b.snapshot_mode:
            args.append(f"--snapshotMode={b.snapshot_mode}")
        if b.enable_cache:
            args.append("--cache=true")
        if b.cache_repo:
            args.append(f"--cache-repo={b.cache_repo}")
        if b.cache_ttl:
            args.append(f"--cache-ttl={b.cache_ttl}h")
        if b.digest_file:
            args.append(f"--digest-file={b.digest_file}")
        if b.no_push:
            args.append("--no-push")
        if b.verbosity:
            args.append(f"--verbosity={b.verbosity}")
        if b.platform:
            args.append(f"--customPlatform={b.platform}")
        for mirror in b.mirrors:
            args.append(f"--registry-mirror={mirror}")
        if b.skip_unused_stages:
            args.append("--skip-unused-stages=true")
        if b.tar_path:
            args.append(f"--tar-path={b.tar_path}")

        return args

    def exec(self) -> BuildResult:
        """
        执行构建

        Returns:
            BuildResult: 仓库名、标签和 digest

        Raises:
            BuildError: 参数错误或执行器失败时抛出
            TagError: 标签计算失败时抛出
        """
        self.validate()
        tags = self.resolve_tags()

        # 需要写出产物文件或输出文件时才让执行器生成 digest 文件
        try:
            self.build.digest_file = digest_file_name(
                self.build.digest_file, self.artifact.output_file or self.artifact.artifact_file
            )
        except OutputError as e:
            raise BuildError(str(e)) from e

        self._prepare_tar_path()
        args = self.command_args(tags)

        logger.info(f"开始构建镜像 {self.build.repo}，标签: {', '.join(tags)}")
        try:
            self.runner(args, env=self.env)
        except subprocess.CalledProcessError as e:
            raise BuildError(f"kaniko 执行失败，返回码 {e.returncode}") from e
        except OSError as e:
            raise BuildError(f"无法启动 kaniko 执行器 {self.executor}: {e}") from e

        digest = ""
        if self.build.digest_file:
            digest = read_digest_file(self.build.digest_file) or ""

        self._write_outputs(tags, digest)
        logger.success(f"镜像 {self.build.repo} 构建成功")
        return {"repo": self.build.repo, "tags": tags, "digest": digest}

    def _prepare_tar_path(self) -> None:
        """创建 tar 包所在目录，无法创建时不保存 tar 包"""
        if not self.build.tar_path:
            return
        try:
            Path(self.build.tar_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"无法创建 tar 包目录，跳过保存 tar 包: {e}")
            self.build.tar_path = ""

    def _write_outputs(self, tags: List[str], digest: str) -> None:
        """写出产物文件和输出文件，失败只记录日志"""
        if self.artifact.artifact_file and self.build.digest_file:
            if not digest:
                logger.warning(f"未读取到镜像 digest，产物文件 {self.artifact.artifact_file} 中的 digest 为空")
            try:
                write_artifact_file(
                    self.artifact.artifact_file,
                    self.artifact.registry_type,
                    self.artifact.registry,
                    self.artifact.repo or self.build.repo,
                    digest,
                    tags,
                )
            except OutputError as e:
                logger.error(f"写入产物文件失败: {e}")

        output_file = self.artifact.output_file
        if output_file and (digest or self.build.tar_path):
            try:
                write_output_file(output_file, digest, self.build.tar_path)
            except OutputError as e:
                logger.error(f"写入输出文件失败: {e}")

