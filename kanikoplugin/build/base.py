"""构建相关基础类型定义"""

from typing import List, TypedDict


class PluginError(Exception):
    """插件错误基类"""
    pass


class TagError(PluginError):
    """标签计算错误"""
    pass


class BuildError(PluginError):
    """镜像构建错误"""
    pass


class BuildResult(TypedDict):
    """一次构建的结果信息"""
    repo: str
    tags: List[str]
    digest: str
