from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
import shutil

import fetching
import toolchain
from constants import DOWNLOAD_BASE_URL, LOCAL_BUILD_DIRNAME, PREFIX_DIRNAME
from hermetic import sez
from toolchain import BuildOutcome
from versioning import ArchiveLocation, VersionSpec, resolve


class Fetcher(Protocol):
    def __call__(self, url: str, destination_dir: Path, expected_dir: Path) -> None:
        """Download and unpack `url` so that `expected_dir` exists."""


class Builder(Protocol):
    def __call__(self, source_dir: Path, prefix_dir: Path, platform_id: str) -> BuildOutcome:
        """Build and install `source_dir` into `prefix_dir`."""


@dataclass(frozen=True)
class InstallLayout:
    install_root: Path
    extracted_source_dir: Path
    prefix_dir: Path

    @classmethod
    def for_work_root(cls, work_root: Path, location: ArchiveLocation) -> "InstallLayout":
        install_root = work_root / LOCAL_BUILD_DIRNAME
        return cls(
            install_root=install_root,
            extracted_source_dir=install_root / location.directory_name,
            prefix_dir=work_root / PREFIX_DIRNAME,
        )

    @property
    def lib_dir(self) -> Path:
        return self.prefix_dir / "lib"

    @property
    def include_dir(self) -> Path:
        return self.prefix_dir / "include"


def remove_partial_install_root(install_root: Path) -> None:
    """Best-effort removal, so that a half-unpacked tree is never mistaken
    for a cache hit on the next run. Failures are reported, not raised."""
    if not install_root.exists():
        return
    try:
        shutil.rmtree(install_root)
    except OSError as e:
        sez(f"WARNING: could not remove {install_root}: {e}", ctx="(fetch) ", err=True)


def provision(
    version_spec: VersionSpec,
    work_root: Path,
    *,
    platform_id: str,
    base_url: str = DOWNLOAD_BASE_URL,
    fetcher: Fetcher = fetching.fetch,
    builder: Builder = toolchain.build,
) -> BuildOutcome:
    """This is the main entry point for provisioning.

    Only the download is cached: if the extracted source tree is already
    present it is reused, but configure/make/make install run every time.
    A failed download removes `local_build/` entirely; a failed build
    leaves the fetched tree in place.
    """

    def say(msg: str):
        sez(msg, ctx="(provision) ")

    location = resolve(version_spec, base_url=base_url)
    layout = InstallLayout.for_work_root(Path(work_root).absolute(), location)

    if layout.extracted_source_dir.exists():
        say(f"Reusing previously fetched {layout.extracted_source_dir}")
    else:
        try:
            fetcher(location.url, layout.install_root, layout.extracted_source_dir)
        except BaseException:
            remove_partial_install_root(layout.install_root)
            raise

    outcome = builder(layout.extracted_source_dir, layout.prefix_dir, platform_id)
    say(f"LAME {version_spec.version_string} installed to {layout.prefix_dir}")
    return outcome
