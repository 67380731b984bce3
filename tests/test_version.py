import pytest

from kanikoplugin.build import version


@pytest.mark.parametrize(
    "value,expected",
    [
        ("v1.2.3", ("1", "2", "3", "", "")),
        ("v1.2", ("1", "2", "0", "", "")),
        ("v1", ("1", "0", "0", "", "")),
        ("v1.2.3-rc.1", ("1", "2", "3", "rc.1", "")),
        ("v1.2.3-rc1+build.5", ("1", "2", "3", "rc1", "build.5")),
        ("v0.0.0", ("0", "0", "0", "", "")),
    ],
)
def test_parse(value, expected):
    parsed = version.parse(value)
    assert parsed is not None
    assert (parsed.major, parsed.minor, parsed.patch, parsed.prerelease, parsed.build) == expected


@pytest.mark.parametrize(
    "value",
    [
        "1.2.3",  # 缺少 v 前缀
        "latest",
        "v1+bld",  # 简写形式不能带构建信息
        "v1.2-rc1",
        "v01.2.3",
        "v1.02.3",
        "v1.2.3-01",
        "v1.2.3.4",
        "v1.2.3-",
        "v1.2.3_rc1",
        "",
    ],
)
def test_parse_invalid(value):
    assert version.parse(value) is None
    assert not version.is_valid(value)


def test_labels():
    parsed = version.parse("v1.2.3-beta+meta")
    assert parsed.major_label == "v1"
    assert parsed.major_minor_label == "v1.2"
    assert parsed.canonical == "v1.2.3-beta"
    assert parsed.build_suffix == "+meta"


def test_canonical_fills_shorthand():
    assert version.parse("v2").canonical == "v2.0.0"
    assert version.parse("v2.5").canonical == "v2.5.0"


def test_as_tuple_compares_numerically():
    assert version.parse("v1.10.0").as_tuple() > version.parse("v1.8.0").as_tuple()


def test_strip_prefix():
    assert version.strip_prefix("v1.2.3") == "1.2.3"
    assert version.strip_prefix("1.2.3") == "1.2.3"
