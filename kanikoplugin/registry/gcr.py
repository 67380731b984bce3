"""GCR/GAR 仓库认证"""

from pathlib import Path
from typing import Dict, Union

from loguru import logger

from ..constants import DEFAULT_PATHS, ENV_NAMES
from .base import ConfigWriteError, CredentialError


def setup_gcr_auth(
    json_key: str, key_path: Union[str, Path] = DEFAULT_PATHS["gcr_key_file"]
) -> Dict[str, str]:
    """
    写入 GCP 服务账号密钥文件

    Args:
        json_key: 服务账号 JSON 密钥内容
        key_path: 密钥文件路径

    Returns:
        Dict[str, str]: 需要传给执行器子进程的环境变量

    Raises:
        CredentialError: 未指定密钥时抛出
        ConfigWriteError: 写入密钥文件失败时抛出
    """
    if not json_key:
        raise CredentialError("必须指定 GCR JSON 密钥 (json-key)")

    key_file = Path(key_path)
    try:
        key_file.parent.mkdir(parents=True, exist_ok=True)
        key_file.write_text(json_key, encoding="utf-8")
    except OSError as e:
        raise ConfigWriteError(f"写入 GCR JSON 密钥失败: {e}") from e

    logger.info(f"已写入 GCR 密钥文件 {key_file}")
    return {ENV_NAMES["gcr_credentials"]: str(key_file)}
