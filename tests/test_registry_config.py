import json

import pytest
from docker.auth import load_config

from kanikoplugin.registry import (
    ConfigWriteError,
    CredentialError,
    DockerConfig,
    RegistryCredential,
    create_docker_config,
    encode_auth,
    normalize_registry,
)

REGISTRY_V1 = "https://index.docker.io/v1/"


def test_encode_auth():
    assert encode_auth("test", "password") == "dGVzdDpwYXNzd29yZA=="


@pytest.mark.parametrize(
    "registry",
    ["https://index.docker.io/v2/", "https://registry.hub.docker.com/v2/"],
)
def test_normalize_v2_registry(registry):
    assert normalize_registry(registry) == REGISTRY_V1


def test_normalize_keeps_other_registries():
    assert normalize_registry("quay.io") == "quay.io"
    assert normalize_registry(REGISTRY_V1) == REGISTRY_V1


def test_add_credential():
    config = DockerConfig()
    config.add(RegistryCredential(REGISTRY_V1, "test", "password"))
    assert config.to_dict() == {"auths": {REGISTRY_V1: {"auth": "dGVzdDpwYXNzd29yZA=="}}}


def test_add_rewrites_v2_registry():
    config = DockerConfig()
    config.add(RegistryCredential("https://index.docker.io/v2/", "test", "password"))
    assert list(config.auths) == [REGISTRY_V1]


def test_add_skips_empty_registry():
    config = DockerConfig()
    config.add(RegistryCredential("", "", ""))
    assert config.auths == {}


def test_add_requires_username():
    config = DockerConfig()
    with pytest.raises(CredentialError) as excinfo:
        config.add(RegistryCredential("quay.io", "", "password"))
    assert "quay.io" in str(excinfo.value)
    assert "username" in str(excinfo.value)


def test_add_requires_password():
    config = DockerConfig()
    with pytest.raises(CredentialError) as excinfo:
        config.add(RegistryCredential("quay.io", "test", ""))
    assert "quay.io" in str(excinfo.value)
    assert "password" in str(excinfo.value)


def test_add_is_last_write_wins():
    config = DockerConfig()
    config.add(RegistryCredential("quay.io", "old", "secret"))
    config.add(RegistryCredential("quay.io", "new", "secret"))
    assert config.auths == {"quay.io": encode_auth("new", "secret")}


def test_add_credentials_with_base_image_registry():
    config = DockerConfig()
    config.add_credentials(
        [
            RegistryCredential(REGISTRY_V1, "push", "secret"),
            RegistryCredential("docker.example.com", "pull", "secret"),
        ]
    )
    assert set(config.auths) == {REGISTRY_V1, "docker.example.com"}


def test_cred_helpers_omitted_when_empty():
    config = DockerConfig()
    config.set_auth("quay.io", "test", "password")
    assert "credHelpers" not in config.to_dict()


def test_cred_helpers_serialized():
    config = DockerConfig()
    config.set_cred_helper("public.ecr.aws", "ecr-login")
    config.set_cred_helper("", "ecr-login")
    assert config.to_dict() == {"auths": {}, "credHelpers": {"public.ecr.aws": "ecr-login"}}


def test_finalize():
    config = DockerConfig()
    config.set_auth("quay.io", "test", "password")
    config.set_cred_helper("public.ecr.aws", "ecr-login")
    assert config.finalize() == {
        "auths": {"quay.io": {"auth": "dGVzdDpwYXNzd29yZA=="}},
        "credHelpers": {"public.ecr.aws": "ecr-login"},
    }


def test_from_dict_reads_back_json():
    config = DockerConfig()
    config.set_auth("quay.io", "test", "password")
    config.set_cred_helper("123.dkr.ecr.us-east-1.amazonaws.com", "ecr-login")

    restored = DockerConfig.from_dict(json.loads(config.to_json()))
    assert restored.auths == config.auths
    assert restored.cred_helpers == config.cred_helpers


def test_write_creates_directory(tmp_path):
    config = DockerConfig()
    config.add(RegistryCredential(REGISTRY_V1, "test", "password"))

    path = config.write(tmp_path / "kaniko" / ".docker")

    assert path == tmp_path / "kaniko" / ".docker" / "config.json"
    assert json.loads(path.read_text()) == {"auths": {REGISTRY_V1: {"auth": "dGVzdDpwYXNzd29yZA=="}}}


def test_written_config_readable_by_docker(tmp_path):
    config = DockerConfig()
    config.add(RegistryCredential("quay.io", "test", "password"))
    path = config.write(tmp_path)

    auth_config = load_config(config_path=str(path))
    assert auth_config.auths["quay.io"]["username"] == "test"
    assert auth_config.auths["quay.io"]["password"] == "password"


def test_write_directory_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    with pytest.raises(ConfigWriteError, match="创建目录"):
        DockerConfig().write(blocker / "sub")


def test_write_file_error(tmp_path):
    # config.json 是目录时写入失败
    (tmp_path / "config.json").mkdir()
    with pytest.raises(ConfigWriteError, match="写入认证配置文件"):
        DockerConfig().write(tmp_path)


def test_create_docker_config(tmp_path):
    config = create_docker_config(
        [RegistryCredential(REGISTRY_V1, "test", "password"), RegistryCredential("", "", "")],
        tmp_path,
    )
    assert list(config.auths) == [REGISTRY_V1]
    assert (tmp_path / "config.json").is_file()


def test_create_docker_config_validates_before_writing(tmp_path):
    with pytest.raises(CredentialError):
        create_docker_config([RegistryCredential("quay.io", "test", "")], tmp_path)
    assert not (tmp_path / "config.json").exists()
