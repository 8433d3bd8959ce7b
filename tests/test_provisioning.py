from pathlib import Path

import pytest

import provisioning
from provisioning import InstallLayout
from provisioning_errors import ConfigureFailedError, FetchError, HttpStatusError
from toolchain import BuildOutcome
from versioning import resolve


def read_log(log: Path) -> list[str]:
    return log.read_text(encoding="utf-8").splitlines()


def test_layout(work_root, version_spec):
    layout = InstallLayout.for_work_root(work_root, resolve(version_spec))

    assert layout.install_root == work_root / "local_build"
    assert layout.extracted_source_dir == work_root / "local_build" / "lame-3.100"
    assert layout.prefix_dir == work_root / "lame-install"
    assert layout.lib_dir == work_root / "lame-install" / "lib"
    assert layout.include_dir == work_root / "lame-install" / "include"


def test_end_to_end(served_lame, work_root, version_spec, toolchain_log):
    outcome = provisioning.provision(
        version_spec, work_root, platform_id="linux", base_url=served_lame.base_url
    )

    assert outcome.lib_dir == work_root / "lame-install" / "lib"
    assert outcome.include_dir == work_root / "lame-install" / "include"
    assert outcome.library_name == "mp3lame"
    assert read_log(toolchain_log) == [
        "configure --enable-nasm --enable-static --with-pic "
        f"--prefix={work_root / 'lame-install'}",
        "make",
        "make install",
    ]
    assert served_lame.requests_seen == ["/3.100/lame-3.100.tar.gz"]


def test_second_run_skips_download_but_rebuilds(
    served_lame, work_root, version_spec, toolchain_log
):
    for _ in range(2):
        provisioning.provision(
            version_spec, work_root, platform_id="macos", base_url=served_lame.base_url
        )

    assert len(served_lame.requests_seen) == 1
    assert read_log(toolchain_log).count("make install") == 2


def test_cache_hit_never_calls_fetcher(work_root, version_spec):
    (work_root / "local_build" / "lame-3.100").mkdir(parents=True)
    built = []

    def fetcher(url, destination_dir, expected_dir):
        raise AssertionError("fetcher must not run on a cache hit")

    def builder(source_dir, prefix_dir, platform_id):
        built.append((source_dir, prefix_dir, platform_id))
        return BuildOutcome(prefix_dir / "lib", prefix_dir / "include", "mp3lame")

    provisioning.provision(
        version_spec, work_root, platform_id="linux", fetcher=fetcher, builder=builder
    )

    assert built == [
        (work_root / "local_build" / "lame-3.100", work_root / "lame-install", "linux")
    ]


def test_fetch_failure_removes_install_root(work_root, version_spec):
    def fetcher(url, destination_dir, expected_dir):
        (destination_dir / "lame-3.100").mkdir(parents=True)
        (destination_dir / "lame-3.100" / "half-written.c").write_text("int", encoding="utf-8")
        raise FetchError("connection reset", url=url)

    def builder(source_dir, prefix_dir, platform_id):
        raise AssertionError("builder must not run after a failed fetch")

    with pytest.raises(FetchError, match="connection reset"):
        provisioning.provision(
            version_spec, work_root, platform_id="linux", fetcher=fetcher, builder=builder
        )

    assert not (work_root / "local_build").exists()


def test_http_404_leaves_no_install_root(tarball_server, work_root, version_spec):
    with pytest.raises(HttpStatusError):
        provisioning.provision(
            version_spec, work_root, platform_id="linux", base_url=tarball_server.base_url
        )

    assert not (work_root / "local_build").exists()


def test_interrupted_fetch_also_cleans_up(work_root, version_spec):
    def fetcher(url, destination_dir, expected_dir):
        destination_dir.mkdir(parents=True)
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        provisioning.provision(version_spec, work_root, platform_id="linux", fetcher=fetcher)

    assert not (work_root / "local_build").exists()


def test_cleanup_failure_does_not_mask_fetch_error(work_root, version_spec, monkeypatch, capsys):
    def fetcher(url, destination_dir, expected_dir):
        destination_dir.mkdir(parents=True)
        raise FetchError("boom", url=url)

    def failing_rmtree(path, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(provisioning.shutil, "rmtree", failing_rmtree)

    with pytest.raises(FetchError, match="boom"):
        provisioning.provision(version_spec, work_root, platform_id="linux", fetcher=fetcher)

    assert "could not remove" in capsys.readouterr().err


def test_build_failure_keeps_fetched_tree(
    served_lame, work_root, version_spec, toolchain_log, monkeypatch
):
    monkeypatch.setenv("FAKE_CONFIGURE_STATUS", "1")

    with pytest.raises(ConfigureFailedError):
        provisioning.provision(
            version_spec, work_root, platform_id="linux", base_url=served_lame.base_url
        )

    assert (work_root / "local_build" / "lame-3.100").is_dir()
    assert not (work_root / "lame-install").exists()

    # The next run reuses the tree.
    monkeypatch.delenv("FAKE_CONFIGURE_STATUS")
    provisioning.provision(
        version_spec, work_root, platform_id="linux", base_url=served_lame.base_url
    )
    assert len(served_lame.requests_seen) == 1


def test_unwritable_install_root_is_fetch_error(served_lame, work_root, version_spec):
    (work_root / "local_build").write_text("", encoding="utf-8")

    with pytest.raises(FetchError, match="Cannot create"):
        provisioning.provision(
            version_spec, work_root, platform_id="linux", base_url=served_lame.base_url
        )
