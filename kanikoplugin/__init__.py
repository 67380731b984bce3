"""kaniko 镜像构建插件"""

# 导入loguru并配置logger
import os

from loguru import logger

from .constants import ENV_NAMES

# 移除默认处理器
logger.remove()
# 添加标准输出处理器
logger.add(
    sink=lambda msg: print(msg, end=""),  # 使用标准输出
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    colorize=True,
    level=os.environ.get(ENV_NAMES["log_level"], "INFO").upper(),
)

# 导入其他模块
from .cli import app, main

__version__ = "0.1.0"

__all__ = [
    "logger",
    "app",
    "main",
]
