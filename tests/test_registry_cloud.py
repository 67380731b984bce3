import os

import pytest

from kanikoplugin.registry import (
    ConfigWriteError,
    CredentialError,
    create_ecr_config,
    is_registry_public,
    needs_cred_helper,
    setup_gcr_auth,
)
from kanikoplugin.registry.config import encode_auth

ECR_REGISTRY = "123456789012.dkr.ecr.us-east-1.amazonaws.com"


def test_is_registry_public():
    assert is_registry_public("public.ecr.aws/abc")
    assert not is_registry_public(ECR_REGISTRY)


@pytest.mark.parametrize(
    "kaniko_version,expected",
    [
        (None, True),
        ("", True),
        ("unknown", True),
        ("1.6.0", True),
        ("v1.7.9", True),
        ("1.8.0", False),
        ("v1.9.1", False),
        ("1.10.0", False),
    ],
)
def test_needs_cred_helper(kaniko_version, expected):
    assert needs_cred_helper(kaniko_version) is expected


def test_ecr_config_with_static_keys():
    config, env = create_ecr_config(
        ECR_REGISTRY, access_key="AKIA", secret_key="secret", kaniko_version="1.6.0"
    )
    assert env == {"AWS_ACCESS_KEY_ID": "AKIA", "AWS_SECRET_ACCESS_KEY": "secret"}
    assert config.cred_helpers == {"public.ecr.aws": "ecr-login", ECR_REGISTRY: "ecr-login"}
    # 凭证只返回给子进程，不写入当前进程
    assert "AWS_ACCESS_KEY_ID" not in os.environ


def test_ecr_config_new_executor_skips_cred_helper():
    config, env = create_ecr_config(ECR_REGISTRY, kaniko_version="1.9.0")
    assert config.cred_helpers == {}
    assert env == {}


def test_ecr_config_with_docker_hub_credentials():
    config, _ = create_ecr_config(
        ECR_REGISTRY, docker_username="user", docker_password="pass", kaniko_version="1.9.0"
    )
    assert config.auths == {"https://index.docker.io/v1/": encode_auth("user", "pass")}


def test_ecr_config_no_push_without_keys():
    config, env = create_ecr_config("", no_push=True)
    assert config.to_dict() == {"auths": {}}
    assert env == {}


def test_ecr_config_requires_registry():
    with pytest.raises(CredentialError, match="registry"):
        create_ecr_config("", access_key="AKIA", secret_key="secret")


def test_gcr_auth_writes_key(tmp_path):
    key_path = tmp_path / "kaniko" / "config.json"
    env = setup_gcr_auth('{"type": "service_account"}', key_path)

    assert env == {"GOOGLE_APPLICATION_CREDENTIALS": str(key_path)}
    assert key_path.read_text() == '{"type": "service_account"}'
    assert "GOOGLE_APPLICATION_CREDENTIALS" not in os.environ


def test_gcr_auth_requires_key(tmp_path):
    with pytest.raises(CredentialError, match="json-key"):
        setup_gcr_auth("", tmp_path / "config.json")


def test_gcr_auth_write_error(tmp_path):
    with pytest.raises(ConfigWriteError):
        setup_gcr_auth("{}", tmp_path)


def test_ecr_config_docker_hub_without_password():
    config, _ = create_ecr_config(ECR_REGISTRY, docker_username="user", kaniko_version="1.9.0")
    assert config.auths == {"https://index.docker.io/v1/": encode_auth("user", "")}
