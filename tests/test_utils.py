import os
import subprocess
import sys

import pytest

from kanikoplugin.build import build_repo, is_docker_hub
from kanikoplugin.utils import (
    build_args_from_env,
    load_env_file,
    read_tags_file,
    run_command,
    split_list,
)


def test_split_list():
    assert split_list("latest, 1.0 ,,1") == ["latest", "1.0", "1"]
    assert split_list("A=1;B=2,3", ";") == ["A=1", "B=2,3"]
    assert split_list("") == []
    assert split_list(None) == []


def test_read_tags_file(tmp_path):
    tags_file = tmp_path / ".tags"
    tags_file.write_text("1.0,1\nlatest\n")
    assert read_tags_file(str(tags_file)) == ["1.0", "1", "latest"]


def test_read_missing_tags_file(tmp_path):
    assert read_tags_file(str(tmp_path / ".tags")) == []


def test_build_args_from_env():
    environ = {"VERSION": "1.0", "EMPTY": ""}
    assert build_args_from_env(["VERSION", "EMPTY", "MISSING"], environ) == ["VERSION=1.0", "EMPTY="]


def test_load_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / "plugin.env"
    env_file.write_text("PLUGIN_FROM_FILE=yes\n")
    monkeypatch.setenv("PLUGIN_ENV_FILE", str(env_file))
    monkeypatch.delenv("PLUGIN_FROM_FILE", raising=False)

    assert load_env_file() == str(env_file)
    assert os.environ["PLUGIN_FROM_FILE"] == "yes"


def test_load_env_file_not_set():
    assert load_env_file({}) is None


def test_load_env_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_env_file({"PLUGIN_ENV_FILE": str(tmp_path / "missing.env")})


def test_run_command_merges_env(tmp_path):
    out = tmp_path / "out"
    code = (
        "import os, sys; "
        f"open({str(out)!r}, 'w').write(os.environ['EXTRA'] + ':' + str('PATH' in os.environ))"
    )
    assert run_command([sys.executable, "-c", code], env={"EXTRA": "value"}) == 0
    assert out.read_text() == "value:True"


def test_run_command_failure():
    with pytest.raises(subprocess.CalledProcessError):
        run_command([sys.executable, "-c", "raise SystemExit(3)"])
    assert run_command([sys.executable, "-c", "raise SystemExit(3)"], check=False) == 3


@pytest.mark.parametrize(
    "registry,expected",
    [
        ("", True),
        ("https://index.docker.io/v1/", True),
        ("https://index.docker.io/v2/", True),
        ("https://registry.hub.docker.com/v2/", True),
        ("docker.io", True),
        ("quay.io", False),
        ("registry.example.com:5000", False),
    ],
)
def test_is_docker_hub(registry, expected):
    assert is_docker_hub(registry) is expected


def test_build_repo():
    assert build_repo("https://index.docker.io/v1/", "myorg/app") == "myorg/app"
    assert build_repo("quay.io", "myorg/app") == "quay.io/myorg/app"
    assert build_repo("quay.io", "quay.io/myorg/app") == "quay.io/myorg/app"
