"""常量配置模块"""

from typing import List, TypedDict

from docker.auth import INDEX_URL

# 镜像仓库地址
REGISTRY_V1: str = INDEX_URL  # 默认仓库
REGISTRY_V2: str = "https://index.docker.io/v2/"  # kaniko 不支持 v2 仓库认证
REGISTRY_HUB_V2: str = "https://registry.hub.docker.com/v2/"
UNSUPPORTED_V2_REGISTRIES: List[str] = [REGISTRY_V2, REGISTRY_HUB_V2]

REGISTRY_ECR_PUBLIC: str = "public.ecr.aws"
REGISTRY_GCR: str = "gcr.io"

# 凭证助手
ECR_CRED_HELPER: str = "ecr-login"
ECR_NO_HELPER_VERSION: str = "1.8.0"  # 从该版本起 kaniko 会自动识别 ECR 仓库

# 文件路径
class DefaultPaths(TypedDict):
    executor: str
    docker_config_dir: str
    digest_file: str
    gcr_key_file: str
    tags_file: str

DEFAULT_PATHS: DefaultPaths = {
    "executor": "/kaniko/executor",
    "docker_config_dir": "/kaniko/.docker",
    "digest_file": "/kaniko/digest-file",
    "gcr_key_file": "/kaniko/config.json",
    "tags_file": ".tags",
}

DOCKER_CONFIG_FILE: str = "config.json"

# 标签
DEFAULT_TAG: str = "latest"
REF_TAGS_PREFIX: str = "refs/tags/"
REF_HEADS_PREFIX: str = "refs/heads/"

# 环境变量
class EnvNames(TypedDict):
    env_file: str
    output: str
    kaniko_version: str
    aws_access_key: str
    aws_secret_key: str
    gcr_credentials: str
    log_level: str

ENV_NAMES: EnvNames = {
    "env_file": "PLUGIN_ENV_FILE",
    "output": "DRONE_OUTPUT",
    "kaniko_version": "KANIKO_VERSION",
    "aws_access_key": "AWS_ACCESS_KEY_ID",
    "aws_secret_key": "AWS_SECRET_ACCESS_KEY",
    "gcr_credentials": "GOOGLE_APPLICATION_CREDENTIALS",
    "log_level": "PLUGIN_LOG_LEVEL",
}

# 产物文件
ARTIFACT_KIND_DOCKER_V1: str = "docker/v1"

class RegistryTypes(TypedDict):
    docker: str
    ecr: str
    gcr: str

REGISTRY_TYPES: RegistryTypes = {"docker": "Docker", "ecr": "ECR", "gcr": "GCR"}

class ArtifactImage(TypedDict):
    image: str
    digest: str

class ArtifactData(TypedDict):
    registryType: str
    registryUrl: str
    images: List[ArtifactImage]

class DockerArtifact(TypedDict):
    kind: str
    data: ArtifactData

# 输出文件的键
OUTPUT_DIGEST_KEY: str = "digest"
OUTPUT_TAR_PATH_KEY: str = "tar_path"
