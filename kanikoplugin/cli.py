"""CLI命令行接口模块"""

import sys
from typing import List, Optional

import typer
from loguru import logger

from kanikoplugin.build import Artifact, Build, Plugin, PluginError, build_repo
from kanikoplugin.constants import DEFAULT_PATHS, ENV_NAMES, REGISTRY_GCR, REGISTRY_TYPES, REGISTRY_V1
from kanikoplugin.registry import (
    RegistryCredential,
    create_docker_config,
    create_ecr_config,
    setup_gcr_auth,
)
from kanikoplugin.utils import load_env_file, read_tags_file, run_command, split_list

# 创建CLI应用
app = typer.Typer(
    help="kaniko 镜像构建插件",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# 各仓库命令共用的构建参数
DOCKERFILE = typer.Option("Dockerfile", "--dockerfile", envvar="PLUGIN_DOCKERFILE", help="Dockerfile路径")
CONTEXT = typer.Option(".", "--context", envvar="PLUGIN_CONTEXT", help="构建上下文目录")
TAGS = typer.Option("", "--tags", envvar="PLUGIN_TAGS", help="镜像标签，逗号分隔，默认读取 .tags 文件或使用 latest")
AUTO_TAG = typer.Option(False, "--auto-tag", envvar="PLUGIN_AUTO_TAG", help="根据提交引用自动生成语义化版本标签")
AUTO_TAG_SUFFIX = typer.Option("", "--auto-tag-suffix", envvar="PLUGIN_AUTO_TAG_SUFFIX", help="自动标签后缀")
EXPAND_TAG = typer.Option(False, "--expand-tag", envvar="PLUGIN_EXPAND_TAG", help="将语义化版本标签展开为 major、major.minor、完整版本")
COMMIT_REF = typer.Option("", "--commit-ref", envvar="DRONE_COMMIT_REF", help="提交引用，例如 refs/tags/v1.0.0")
REPO_BRANCH = typer.Option("", "--repo-branch", envvar="DRONE_REPO_BRANCH", help="仓库默认分支")
BUILD_ARGS = typer.Option("", "--args", envvar="PLUGIN_BUILD_ARGS", help="构建参数，逗号分隔，格式：KEY=VALUE")
BUILD_ARGS_NEW = typer.Option("", "--args-new", envvar="PLUGIN_BUILD_ARGS_NEW", help="构建参数，分号分隔")
MULTIPLE_BUILD_ARGS = typer.Option(False, "--multiple-build-args", envvar="PLUGIN_MULTIPLE_BUILD_ARGS", help="使用分号分隔的构建参数")
ARGS_FROM_ENV = typer.Option("", "--args-from-env", envvar="PLUGIN_BUILD_ARGS_FROM_ENV", help="从环境变量读取的构建参数名，逗号分隔")
TARGET = typer.Option("", "--target", envvar="PLUGIN_TARGET", help="构建目标阶段")
REPO = typer.Option("", "--repo", envvar="PLUGIN_REPO", help="镜像仓库名")
LABELS = typer.Option("", "--custom-labels", envvar="PLUGIN_CUSTOM_LABELS", help="镜像标签 (label)，逗号分隔，格式：k=v")
MIRRORS = typer.Option("", "--registry-mirrors", envvar="PLUGIN_REGISTRY_MIRRORS", help="镜像加速地址，逗号分隔")
SKIP_TLS_VERIFY = typer.Option(False, "--skip-tls-verify", envvar="PLUGIN_SKIP_TLS_VERIFY", help="跳过仓库 TLS 证书校验")
SNAPSHOT_MODE = typer.Option("", "--snapshot-mode", envvar="PLUGIN_SNAPSHOT_MODE", help="快照模式：full、redo 或 time")
ENABLE_CACHE = typer.Option(False, "--enable-cache", envvar="PLUGIN_ENABLE_CACHE", help="启用 kaniko 缓存")
CACHE_REPO = typer.Option("", "--cache-repo", envvar="PLUGIN_CACHE_REPO", help="存放缓存层的远程仓库")
CACHE_TTL = typer.Option(0, "--cache-ttl", envvar="PLUGIN_CACHE_TTL", help="缓存有效期（小时）")
ARTIFACT_FILE = typer.Option("", "--artifact-file", envvar="PLUGIN_ARTIFACT_FILE", help="产物文件路径")
OUTPUT_FILE = typer.Option("", "--output-file", envvar=ENV_NAMES["output"], help="dotenv 格式的输出文件路径")
DIGEST_FILE = typer.Option("", "--digest-file", envvar="PLUGIN_DIGEST_FILE", help="kaniko 写出镜像 digest 的文件路径，默认 /kaniko/digest-file")
NO_PUSH = typer.Option(False, "--no-push", envvar="PLUGIN_NO_PUSH", help="只构建镜像，不推送")
VERBOSITY = typer.Option("", "--verbosity", envvar="PLUGIN_VERBOSITY", help="kaniko 日志级别")
PLATFORM = typer.Option("", "--platform", envvar="PLUGIN_PLATFORM", help="目标平台，例如 linux/amd64")
SKIP_UNUSED_STAGES = typer.Option(False, "--skip-unused-stages", envvar="PLUGIN_SKIP_UNUSED_STAGES", help="跳过目标阶段用不到的构建阶段")
TAR_PATH = typer.Option("", "--tar-path", envvar="PLUGIN_TAR_PATH", help="将镜像保存为 tar 包的路径")
CONFIG_DIR = typer.Option(DEFAULT_PATHS["docker_config_dir"], "--config-dir", envvar="PLUGIN_CONFIG_DIR", help="认证配置目录")
EXECUTOR = typer.Option(DEFAULT_PATHS["executor"], "--executor", envvar="PLUGIN_EXECUTOR", help="kaniko 执行器路径")


def _tags_from(value: str) -> List[str]:
    """解析标签参数，未指定时读取 .tags 文件"""
    return split_list(value) or read_tags_file()


def _build_args_from(args: str, args_new: str, multiple_build_args: bool) -> List[str]:
    """解析构建参数，启用多值参数时使用分号分隔的写法"""
    if multiple_build_args:
        return split_list(args_new, ";")
    return split_list(args)


def _prefixed(registry: str, name: str) -> str:
    """为仓库名加上仓库地址前缀，registry为空时返回原仓库名"""
    if not registry or not name:
        return name
    return f"{registry}/{name}"


def _run_plugin(plugin: Plugin) -> None:
    """执行构建，插件错误时退出并返回1"""
    try:
        plugin.exec()
    except PluginError as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("docker")
def build_docker(
    dockerfile: str = DOCKERFILE,
    context: str = CONTEXT,
    tags: str = TAGS,
    auto_tag: bool = AUTO_TAG,
    auto_tag_suffix: str = AUTO_TAG_SUFFIX,
    expand_tag: bool = EXPAND_TAG,
    commit_ref: str = COMMIT_REF,
    repo_branch: str = REPO_BRANCH,
    args: str = BUILD_ARGS,
    args_new: str = BUILD_ARGS_NEW,
    multiple_build_args: bool = MULTIPLE_BUILD_ARGS,
    args_from_env: str = ARGS_FROM_ENV,
    target: str = TARGET,
    repo: str = REPO,
    labels: str = LABELS,
    mirrors: str = MIRRORS,
    registry: str = typer.Option(REGISTRY_V1, "--registry", envvar="PLUGIN_REGISTRY", help="镜像仓库地址"),
    username: str = typer.Option("", "--username", envvar="PLUGIN_USERNAME", help="仓库用户名"),
    password: str = typer.Option("", "--password", envvar="PLUGIN_PASSWORD", help="仓库密码"),
    base_image_registry: str = typer.Option("", "--base-image-registry", envvar="PLUGIN_BASE_IMAGE_REGISTRY", help="基础镜像仓库地址"),
    base_image_username: str = typer.Option("", "--base-image-username", envvar="PLUGIN_BASE_IMAGE_USERNAME", help="基础镜像仓库用户名"),
    base_image_password: str = typer.Option("", "--base-image-password", envvar="PLUGIN_BASE_IMAGE_PASSWORD", help="基础镜像仓库密码"),
    skip_tls_verify: bool = SKIP_TLS_VERIFY,
    snapshot_mode: str = SNAPSHOT_MODE,
    enable_cache: bool = ENABLE_CACHE,
    cache_repo: str = CACHE_REPO,
    cache_ttl: int = CACHE_TTL,
    artifact_file: str = ARTIFACT_FILE,
    output_file: str = OUTPUT_FILE,
    digest_file: str = DIGEST_FILE,
    no_push: bool = NO_PUSH,
    verbosity: str = VERBOSITY,
    platform: str = PLATFORM,
    skip_unused_stages: bool = SKIP_UNUSED_STAGES,
    tar_path: str = TAR_PATH,
    config_dir: str = CONFIG_DIR,
    executor: str = EXECUTOR,
):
    """构建镜像并推送到 Docker 仓库"""
    try:
        # 只有推送或显式提供了用户名时才配置认证
        if not no_push or username:
            if not base_image_registry:
                logger.info("建议配置基础镜像仓库凭证，避免 Docker Hub 拉取频率限制导致构建失败")
            create_docker_config(
                [
                    RegistryCredential(registry, username, password),
                    RegistryCredential(base_image_registry, base_image_username, base_image_password),
                ],
                config_dir,
            )
    except PluginError as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)

    full_repo = build_repo(registry, repo)
    plugin = Plugin(
        Build(
            repo=full_repo,
            dockerfile=dockerfile,
            context=context,
            tags=_tags_from(tags),
            auto_tag=auto_tag,
            auto_tag_suffix=auto_tag_suffix,
            expand_tag=expand_tag,
            commit_ref=commit_ref,
            repo_branch=repo_branch,
            args=_build_args_from(args, args_new, multiple_build_args),
            args_from_env=split_list(args_from_env),
            target=target,
            labels=split_list(labels),
            mirrors=split_list(mirrors),
            skip_tls_verify=skip_tls_verify,
            snapshot_mode=snapshot_mode,
            enable_cache=enable_cache,
            cache_repo=cache_repo,
            cache_ttl=cache_ttl,
            no_push=no_push,
            verbosity=verbosity,
            platform=platform,
            skip_unused_stages=skip_unused_stages,
            tar_path=tar_path,
            digest_file=digest_file,
        ),
        Artifact(
            repo=full_repo,
            registry=registry,
            artifact_file=artifact_file,
            output_file=output_file,
            registry_type=REGISTRY_TYPES["docker"],
        ),
        executor=executor,
        runner=run_command,
    )
    _run_plugin(plugin)


@app.command("ecr")
def build_ecr(
    dockerfile: str = DOCKERFILE,
    context: str = CONTEXT,
    tags: str = TAGS,
    auto_tag: bool = AUTO_TAG,
    auto_tag_suffix: str = AUTO_TAG_SUFFIX,
    expand_tag: bool = EXPAND_TAG,
    commit_ref: str = COMMIT_REF,
    repo_branch: str = REPO_BRANCH,
    args: str = BUILD_ARGS,
    args_new: str = BUILD_ARGS_NEW,
    multiple_build_args: bool = MULTIPLE_BUILD_ARGS,
    args_from_env: str = ARGS_FROM_ENV,
    target: str = TARGET,
    repo: str = REPO,
    labels: str = LABELS,
    mirrors: str = MIRRORS,
    registry: str = typer.Option("", "--registry", envvar="PLUGIN_REGISTRY", help="ECR 仓库地址"),
    access_key: str = typer.Option("", "--access-key", envvar="PLUGIN_ACCESS_KEY", help="AWS access key"),
    secret_key: str = typer.Option("", "--secret-key", envvar="PLUGIN_SECRET_KEY", help="AWS secret key"),
    docker_username: str = typer.Option("", "--docker-username", envvar="PLUGIN_DOCKER_USERNAME", help="Docker Hub 用户名"),
    docker_password: str = typer.Option("", "--docker-password", envvar="PLUGIN_DOCKER_PASSWORD", help="Docker Hub 密码"),
    kaniko_version: str = typer.Option("", "--kaniko-version", envvar=ENV_NAMES["kaniko_version"], help="kaniko 执行器版本"),
    snapshot_mode: str = SNAPSHOT_MODE,
    enable_cache: bool = ENABLE_CACHE,
    cache_repo: str = CACHE_REPO,
    cache_ttl: int = CACHE_TTL,
    artifact_file: str = ARTIFACT_FILE,
    output_file: str = OUTPUT_FILE,
    digest_file: str = DIGEST_FILE,
    no_push: bool = NO_PUSH,
    verbosity: str = VERBOSITY,
    platform: str = PLATFORM,
    skip_unused_stages: bool = SKIP_UNUSED_STAGES,
    tar_path: str = TAR_PATH,
    config_dir: str = CONFIG_DIR,
    executor: str = EXECUTOR,
):
    """构建镜像并推送到 AWS ECR"""
    try:
        docker_config, env = create_ecr_config(
            registry,
            docker_username=docker_username,
            docker_password=docker_password,
            access_key=access_key,
            secret_key=secret_key,
            no_push=no_push,
            kaniko_version=kaniko_version or None,
        )
        docker_config.write(config_dir)
    except PluginError as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)

    plugin = Plugin(
        Build(
            repo=_prefixed(registry, repo),
            dockerfile=dockerfile,
            context=context,
            tags=_tags_from(tags),
            auto_tag=auto_tag,
            auto_tag_suffix=auto_tag_suffix,
            expand_tag=expand_tag,
            commit_ref=commit_ref,
            repo_branch=repo_branch,
            args=_build_args_from(args, args_new, multiple_build_args),
            args_from_env=split_list(args_from_env),
            target=target,
            labels=split_list(labels),
            mirrors=split_list(mirrors),
            snapshot_mode=snapshot_mode,
            enable_cache=enable_cache,
            cache_repo=_prefixed(registry, cache_repo),
            cache_ttl=cache_ttl,
            no_push=no_push,
            verbosity=verbosity,
            platform=platform,
            skip_unused_stages=skip_unused_stages,
            tar_path=tar_path,
            digest_file=digest_file,
        ),
        Artifact(
            repo=repo,
            registry=registry,
            artifact_file=artifact_file,
            output_file=output_file,
            registry_type=REGISTRY_TYPES["ecr"],
        ),
        env=env,
        executor=executor,
        runner=run_command,
    )
    _run_plugin(plugin)


@app.command("gcr")
def build_gcr(
    dockerfile: str = DOCKERFILE,
    context: str = CONTEXT,
    tags: str = TAGS,
    auto_tag: bool = AUTO_TAG,
    auto_tag_suffix: str = AUTO_TAG_SUFFIX,
    expand_tag: bool = EXPAND_TAG,
    commit_ref: str = COMMIT_REF,
    repo_branch: str = REPO_BRANCH,
    args: str = BUILD_ARGS,
    args_new: str = BUILD_ARGS_NEW,
    multiple_build_args: bool = MULTIPLE_BUILD_ARGS,
    args_from_env: str = ARGS_FROM_ENV,
    target: str = TARGET,
    repo: str = REPO,
    labels: str = LABELS,
    registry: str = typer.Option(REGISTRY_GCR, "--registry", envvar="PLUGIN_REGISTRY", help="GCR/GAR 仓库地址"),
    json_key: str = typer.Option("", "--json-key", envvar="PLUGIN_JSON_KEY", help="GCP 服务账号 JSON 密钥"),
    key_path: str = typer.Option(DEFAULT_PATHS["gcr_key_file"], "--key-path", envvar="PLUGIN_KEY_PATH", help="密钥文件写入路径"),
    snapshot_mode: str = SNAPSHOT_MODE,
    enable_cache: bool = ENABLE_CACHE,
    cache_repo: str = CACHE_REPO,
    cache_ttl: int = CACHE_TTL,
    artifact_file: str = ARTIFACT_FILE,
    output_file: str = OUTPUT_FILE,
    digest_file: str = DIGEST_FILE,
    no_push: bool = NO_PUSH,
    verbosity: str = VERBOSITY,
    platform: str = PLATFORM,
    tar_path: str = TAR_PATH,
    executor: str = EXECUTOR,
):
    """构建镜像并推送到 Google GCR/GAR"""
    try:
        env = setup_gcr_auth(json_key, key_path)
    except PluginError as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)

    if not repo:
        logger.error("错误：必须指定镜像仓库名 (repo)")
        sys.exit(1)

    plugin = Plugin(
        Build(
            repo=_prefixed(registry, repo),
            dockerfile=dockerfile,
            context=context,
            tags=_tags_from(tags),
            auto_tag=auto_tag,
            auto_tag_suffix=auto_tag_suffix,
            expand_tag=expand_tag,
            commit_ref=commit_ref,
            repo_branch=repo_branch,
            args=_build_args_from(args, args_new, multiple_build_args),
            args_from_env=split_list(args_from_env),
            target=target,
            labels=split_list(labels),
            snapshot_mode=snapshot_mode,
            enable_cache=enable_cache,
            cache_repo=_prefixed(registry, cache_repo),
            cache_ttl=cache_ttl,
            no_push=no_push,
            verbosity=verbosity,
            platform=platform,
            tar_path=tar_path,
            digest_file=digest_file,
        ),
        Artifact(
            repo=repo,
            registry=registry,
            artifact_file=artifact_file,
            output_file=output_file,
            registry_type=REGISTRY_TYPES["gcr"],
        ),
        env=env,
        executor=executor,
        runner=run_command,
    )
    _run_plugin(plugin)


def _main_for(command: Optional[str]) -> None:
    """加载环境变量文件后运行CLI"""
    try:
        load_env_file()
    except FileNotFoundError as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)

    if command is None:
        app()
    else:
        app(args=[command, *sys.argv[1:]], prog_name=f"kaniko-{command}")


def main():
    """主入口函数"""
    _main_for(None)


def docker_main():
    """kaniko-docker 入口"""
    _main_for("docker")


def ecr_main():
    """kaniko-ecr 入口"""
    _main_for("ecr")


def gcr_main():
    """kaniko-gcr 入口"""
    _main_for("gcr")


if __name__ == "__main__":
    main()
