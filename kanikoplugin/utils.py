"""工具函数模块"""

import os
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from dotenv import load_dotenv
from loguru import logger

from .constants import DEFAULT_PATHS, ENV_NAMES


def trace(args: Sequence[str]) -> None:
    """以 "+ 命令" 的形式输出将要执行的命令，方便在流水线日志中查看"""
    print(f"+ {' '.join(args)}", flush=True)


def run_command(
    args: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
) -> int:
    """
    运行命令，输出直接写到当前进程的标准输出和标准错误

    Args:
        args: 命令及参数
        env: 额外的环境变量，会合并到当前进程的环境变量之上
        check: 是否检查返回码

    Returns:
        int: 返回码

    Raises:
        subprocess.CalledProcessError: check为True且返回码非0时抛出
    """
    logger.debug(f"执行命令: {' '.join(args)}")
    trace(args)

    process_env = None
    if env:
        process_env = dict(os.environ)
        process_env.update(env)

    # 不捕获输出，执行器的构建日志直接显示在流水线中
    process = subprocess.Popen(list(args), env=process_env)
    return_code = process.wait()

    if check and return_code != 0:
        logger.error(f"命令执行失败: {args[0]}，返回码 {return_code}")
        raise subprocess.CalledProcessError(return_code, list(args))

    return return_code


def split_list(value: Optional[str], delimiter: str = ",") -> List[str]:
    """
    拆分以分隔符连接的参数值，去掉空白项

    Args:
        value: 原始参数值，例如 "latest,1.0"
        delimiter: 分隔符

    Returns:
        List[str]: 拆分后的列表
    """
    if not value:
        return []
    return [item.strip() for item in value.split(delimiter) if item.strip()]


def read_tags_file(path: str = DEFAULT_PATHS["tags_file"]) -> List[str]:
    """
    读取 .tags 文件中的标签，文件不存在时返回空列表

    文件内容可以用逗号或换行分隔。
    """
    tags_file = Path(path)
    if not tags_file.is_file():
        return []
    content = tags_file.read_text(encoding="utf-8").replace("\n", ",")
    tags = split_list(content)
    if tags:
        logger.info(f"已从 {tags_file} 读取标签: {', '.join(tags)}")
    return tags


def build_args_from_env(names: Sequence[str], environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    将环境变量转换为构建参数

    Args:
        names: 环境变量名列表
        environ: 环境变量来源，默认为当前进程环境变量

    Returns:
        List[str]: "NAME=value" 格式的构建参数，未设置的变量会被忽略
    """
    source = os.environ if environ is None else environ
    args = []
    for name in names:
        if name in source:
            args.append(f"{name}={source[name]}")
        else:
            logger.warning(f"环境变量 {name} 未设置，忽略该构建参数")
    return args


def load_env_file(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    加载 PLUGIN_ENV_FILE 指定的 dotenv 文件

    Returns:
        Optional[str]: 加载的文件路径，未指定时返回None

    Raises:
        FileNotFoundError: 指定的文件不存在时抛出
    """
    source = os.environ if environ is None else environ
    env_file = source.get(ENV_NAMES["env_file"])
    if not env_file:
        return None
    if not Path(env_file).is_file():
        raise FileNotFoundError(f"环境变量文件不存在: {env_file}")
    load_dotenv(env_file)
    logger.debug(f"已加载环境变量文件 {env_file}")
    return env_file

