import pytest

import build_env
from build_env import BuildEnv
from constants import DOWNLOAD_BASE_URL
from provisioning_errors import ConfigurationError


def cargo_env(out_dir, **extra) -> dict[str, str]:
    env = {
        "CARGO_PKG_VERSION_MAJOR": "3",
        "CARGO_PKG_VERSION_MINOR": "100",
        "OUT_DIR": str(out_dir),
    }
    env.update(extra)
    return env


def test_from_environ(work_root):
    env = BuildEnv.from_environ(cargo_env(work_root, CARGO_CFG_TARGET_OS="macos"))

    assert env.version_spec.version_string == "3.100"
    assert env.work_root == work_root
    assert env.platform_id == "macos"
    assert env.base_url == DOWNLOAD_BASE_URL


def test_out_dir_is_canonicalized(work_root):
    (work_root / "nested").mkdir()
    env = BuildEnv.from_environ(cargo_env(work_root / "nested" / ".."))
    assert env.work_root == work_root


def test_mirror_override(work_root):
    env = BuildEnv.from_environ(
        cargo_env(work_root, LAME_DOWNLOAD_BASE_URL="http://mirror.example/lame")
    )
    assert env.base_url == "http://mirror.example/lame"


def test_platform_defaults_to_host(work_root, monkeypatch):
    monkeypatch.setattr(build_env.platform, "system", lambda: "Darwin")
    assert BuildEnv.from_environ(cargo_env(work_root)).platform_id == "macos"

    monkeypatch.setattr(build_env.platform, "system", lambda: "Linux")
    assert BuildEnv.from_environ(cargo_env(work_root)).platform_id == "linux"

    monkeypatch.setattr(build_env.platform, "system", lambda: "FreeBSD")
    assert build_env.host_platform_id() == "freebsd"


@pytest.mark.parametrize(
    "missing", ["CARGO_PKG_VERSION_MAJOR", "CARGO_PKG_VERSION_MINOR", "OUT_DIR"]
)
def test_missing_variables(work_root, missing):
    env = cargo_env(work_root)
    del env[missing]

    with pytest.raises(ConfigurationError, match=missing):
        BuildEnv.from_environ(env)


def test_nonexistent_out_dir(tmp_path):
    with pytest.raises(ConfigurationError):
        BuildEnv.from_environ(cargo_env(tmp_path / "does-not-exist"))


def test_malformed_version(work_root):
    with pytest.raises(ConfigurationError):
        BuildEnv.from_environ(cargo_env(work_root, CARGO_PKG_VERSION_MINOR="x y"))
