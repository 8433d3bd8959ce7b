from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import os
import platform

from constants import (
    DOWNLOAD_BASE_URL,
    ENV_BASE_URL,
    ENV_OUT_DIR,
    ENV_TARGET_OS,
    ENV_VERSION_MAJOR,
    ENV_VERSION_MINOR,
)
from provisioning_errors import ConfigurationError
from versioning import VersionSpec


def host_platform_id() -> str:
    sysname = platform.system()
    return {"Linux": "linux", "Darwin": "macos", "Windows": "windows"}.get(
        sysname, sysname.lower()
    )


def canonical_work_root(out_dir: str | os.PathLike[str] | None) -> Path:
    if out_dir is None or str(out_dir) == "":
        raise ConfigurationError(f"{ENV_OUT_DIR} is not set")
    try:
        return Path(out_dir).resolve(strict=True)
    except OSError as e:
        raise ConfigurationError(f"Work directory {out_dir} does not exist: {e}") from e


@dataclass(frozen=True)
class BuildEnv:
    """Everything the pipeline needs from its environment, read once."""

    version_spec: VersionSpec
    work_root: Path
    platform_id: str
    base_url: str = DOWNLOAD_BASE_URL

    @classmethod
    def from_values(
        cls,
        major: str | None,
        minor: str | None,
        out_dir: str | os.PathLike[str] | None,
        target_os: str | None = None,
        base_url: str | None = None,
    ) -> "BuildEnv":
        if major is None:
            raise ConfigurationError(f"{ENV_VERSION_MAJOR} is not set")
        if minor is None:
            raise ConfigurationError(f"{ENV_VERSION_MINOR} is not set")
        return cls(
            version_spec=VersionSpec(major=major, minor=minor),
            work_root=canonical_work_root(out_dir),
            platform_id=target_os or host_platform_id(),
            base_url=base_url or DOWNLOAD_BASE_URL,
        )

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] = os.environ) -> "BuildEnv":
        return cls.from_values(
            major=environ.get(ENV_VERSION_MAJOR),
            minor=environ.get(ENV_VERSION_MINOR),
            out_dir=environ.get(ENV_OUT_DIR),
            target_os=environ.get(ENV_TARGET_OS),
            base_url=environ.get(ENV_BASE_URL),
        )
