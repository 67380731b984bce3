"""测试公共工具"""

import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest


class FakeRunner:
    """
    代替 run_command 的执行器

    记录每次调用的命令和环境变量，并按需写入 digest 文件。
    """

    def __init__(self, digest: str = "", returncode: int = 0) -> None:
        self.digest = digest
        self.returncode = returncode
        self.calls: List[Tuple[List[str], Dict[str, str]]] = []

    def __call__(self, args, env=None, check=True) -> int:
        args = list(args)
        self.calls.append((args, dict(env or {})))
        if check and self.returncode:
            raise subprocess.CalledProcessError(self.returncode, args)

        digest_file = self.flag_value(args, "--digest-file")
        if self.digest and digest_file:
            Path(digest_file).write_text(self.digest + "\n", encoding="utf-8")
        return self.returncode

    @property
    def args(self) -> List[str]:
        assert self.calls, "执行器未被调用"
        return self.calls[-1][0]

    @property
    def env(self) -> Dict[str, str]:
        assert self.calls, "执行器未被调用"
        return self.calls[-1][1]

    @staticmethod
    def flag_value(args: List[str], flag: str) -> Optional[str]:
        prefix = flag + "="
        for arg in args:
            if arg.startswith(prefix):
                return arg[len(prefix):]
        return None


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """清理会影响CLI默认值的流水线环境变量"""
    for name in list(os.environ):
        if name.startswith(("PLUGIN_", "DRONE_")) or name in (
            "KANIKO_VERSION",
            "AWS_ACCESS_KEY_ID",
            "AWS_SECRET_ACCESS_KEY",
            "GOOGLE_APPLICATION_CREDENTIALS",
        ):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def dockerfile(tmp_path):
    path = tmp_path / "Dockerfile"
    path.write_text("FROM alpine\n", encoding="utf-8")
    return path
