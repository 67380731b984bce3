"""镜像标签计算相关功能"""

from typing import List, Optional, Sequence

from loguru import logger

from ..constants import DEFAULT_TAG, REF_HEADS_PREFIX, REF_TAGS_PREFIX
from . import version
from .base import TagError


def expand(tag: str, expand_enabled: bool) -> List[str]:
    """
    按语义化版本规则展开单个标签

    "v1.2.3" 展开为 "1"、"1.2"、"1.2.3"；预发布版本只保留完整版本号，
    避免浮动标签指向不稳定版本；构建信息会附加到每个展开后的标签上。

    Args:
        tag: 原始标签
        expand_enabled: 是否启用展开

    Returns:
        List[str]: 展开后的标签列表，不能展开时返回原始标签
    """
    # 语义化版本不允许下划线
    semver_tag = tag.replace("_", "-")
    # 同时兼容 "1.2.3" 和 "v1.2.3"
    with_prefix = version.VERSION_PREFIX + semver_tag
    if not version.is_valid(semver_tag) and version.is_valid(with_prefix):
        semver_tag = with_prefix

    parsed = version.parse(semver_tag)
    if not expand_enabled or parsed is None:
        return [tag]

    if parsed.prerelease:
        return [version.strip_prefix(semver_tag)]

    def label_for(base: str) -> str:
        return version.strip_prefix(base) + parsed.build_suffix

    return [
        label_for(parsed.major_label),
        label_for(parsed.major_minor_label),
        label_for(parsed.canonical),
    ]


def strip_tag_prefix(ref: str) -> str:
    """去掉 "refs/tags/" 前缀"""
    return ref[len(REF_TAGS_PREFIX):] if ref.startswith(REF_TAGS_PREFIX) else ref


def strip_head_prefix(ref: str) -> str:
    """去掉 "refs/heads/" 前缀"""
    return ref[len(REF_HEADS_PREFIX):] if ref.startswith(REF_HEADS_PREFIX) else ref


def is_tag_ref(ref: str) -> bool:
    return ref.startswith(REF_TAGS_PREFIX)


def should_auto_tag(commit_ref: str, default_branch: str) -> bool:
    """
    判断当前提交是否应该自动打标签

    Args:
        commit_ref: 提交引用，例如 "refs/tags/v1.0.0" 或 "refs/heads/main"
        default_branch: 仓库默认分支

    Returns:
        bool: 标签引用或默认分支返回True，其它分支返回False
    """
    if is_tag_ref(commit_ref):
        return True
    return bool(default_branch) and strip_head_prefix(commit_ref) == default_branch


def compute_tags(commit_ref: str, suffix: str = "") -> List[str]:
    """
    根据提交引用计算自动标签

    Args:
        commit_ref: 提交引用
        suffix: 标签后缀，例如 "linux-amd64"

    Returns:
        List[str]: 标签列表

    Raises:
        TagError: 标签引用不是合法的语义化版本时抛出
    """
    if is_tag_ref(commit_ref):
        raw_tag = strip_tag_prefix(commit_ref)
        normalized = raw_tag.replace("_", "-")
        if not (version.is_valid(normalized) or version.is_valid(version.VERSION_PREFIX + normalized)):
            raise TagError(f"标签 {raw_tag} 不是合法的语义化版本 (invalid semantic version)")
        tags = expand(raw_tag, True)
    else:
        tags = [DEFAULT_TAG]

    if suffix:
        tags = [f"{tag}-{suffix}" for tag in tags]
    return tags


def has_user_tags(tags: Optional[Sequence[str]]) -> bool:
    """
    判断用户是否显式指定了标签

    只有一个 "latest" 标签时与默认值无法区分，视为未指定。
    """
    if not tags:
        return False
    return not (len(tags) == 1 and tags[0] == DEFAULT_TAG)


def auto_tags(
    tags: Optional[Sequence[str]],
    commit_ref: str,
    default_branch: str,
    suffix: str = "",
    expand_tag: bool = False,
) -> List[str]:
    """
    计算自动标签，并检查与其它参数的冲突

    Args:
        tags: 用户指定的标签
        commit_ref: 提交引用
        default_branch: 仓库默认分支
        suffix: 标签后缀
        expand_tag: 是否同时启用了标签展开

    Returns:
        List[str]: 自动计算出的标签

    Raises:
        TagError: 参数冲突或无法识别提交引用时抛出
    """
    if has_user_tags(tags):
        raise TagError(f"auto-tag 不能与用户指定的标签同时使用: {list(tags or [])}")
    if expand_tag:
        raise TagError("auto-tag 与 expand-tag 不能同时启用")
    if not should_auto_tag(commit_ref, default_branch):
        raise TagError(f"无法根据引用 '{commit_ref}' 自动识别标签 (cannot auto-detect tag)，跳过自动标签")

    result = compute_tags(commit_ref, suffix)
    logger.info(f"自动标签: {', '.join(result)}")
    return result


def resolve_tags(
    tags: Optional[Sequence[str]],
    auto_tag: bool = False,
    expand_tag: bool = False,
    commit_ref: str = "",
    default_branch: str = "",
    suffix: str = "",
) -> List[str]:
    """
    计算最终用于推送的标签列表

    Args:
        tags: 用户指定的标签
        auto_tag: 是否启用自动标签
        expand_tag: 是否启用语义化版本展开
        commit_ref: 提交引用
        default_branch: 仓库默认分支
        suffix: 自动标签后缀

    Returns:
        List[str]: 去重后的标签列表，保持原有顺序
    """
    if auto_tag:
        return auto_tags(tags, commit_ref, default_branch, suffix, expand_tag)

    resolved: List[str] = []
    for tag in tags or [DEFAULT_TAG]:
        for label in expand(tag, expand_tag):
            if label not in resolved:
                resolved.append(label)
    return resolved
