"""语义化版本解析

版本号必须以 "v" 开头，允许 "v1"、"v1.2" 这样的简写形式，
简写形式会补齐为 "v1.0.0"、"v1.2.0"，但不能带预发布或构建信息。
"""

import re
from dataclasses import dataclass
from typing import Optional

VERSION_PREFIX = "v"

_NUMBER = r"0|[1-9][0-9]*"
_IDENT = r"[0-9A-Za-z-]+"

SEMVER_PATTERN = re.compile(
    rf"^v(?P<major>{_NUMBER})"
    rf"(?:\.(?P<minor>{_NUMBER})"
    rf"(?:\.(?P<patch>{_NUMBER})"
    rf"(?:-(?P<prerelease>{_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+(?P<build>{_IDENT}(?:\.{_IDENT})*))?"
    r")?)?$"
)


@dataclass(frozen=True)
class Version:
    """解析后的语义化版本"""

    major: str
    minor: str = "0"
    patch: str = "0"
    prerelease: str = ""
    build: str = ""

    @property
    def major_label(self) -> str:
        return f"{VERSION_PREFIX}{self.major}"

    @property
    def major_minor_label(self) -> str:
        return f"{VERSION_PREFIX}{self.major}.{self.minor}"

    @property
    def canonical(self) -> str:
        """补齐后的版本号，保留预发布信息，不含构建信息"""
        value = f"{VERSION_PREFIX}{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            value += f"-{self.prerelease}"
        return value

    @property
    def build_suffix(self) -> str:
        return f"+{self.build}" if self.build else ""

    def as_tuple(self):
        return int(self.major), int(self.minor), int(self.patch)


def parse(value: str) -> Optional[Version]:
    """
    解析语义化版本

    Args:
        value: 带 "v" 前缀的版本字符串

    Returns:
        Optional[Version]: 解析结果，不是合法版本时返回None
    """
    match = SEMVER_PATTERN.match(value)
    if not match:
        return None

    prerelease = match.group("prerelease") or ""
    # 纯数字的预发布标识不能有前导零
    for ident in prerelease.split(".") if prerelease else []:
        if ident.isdigit() and len(ident) > 1 and ident.startswith("0"):
            return None

    return Version(
        major=match.group("major"),
        minor=match.group("minor") or "0",
        patch=match.group("patch") or "0",
        prerelease=prerelease,
        build=match.group("build") or "",
    )


def is_valid(value: str) -> bool:
    """判断字符串是否为合法的语义化版本"""
    return parse(value) is not None


def strip_prefix(value: str) -> str:
    """去掉版本号开头的 "v" """
    if value.startswith(VERSION_PREFIX):
        return value[len(VERSION_PREFIX):]
    return value
