from dataclasses import dataclass
from pathlib import Path

import hermetic
import patching
from constants import CONFIGURE_FLAGS, LINK_LIBRARY_NAME
from hermetic import sez
from provisioning_errors import (
    BuildError,
    CompileFailedError,
    ConfigureFailedError,
    InstallFailedError,
    PatchError,
    PatchFailedError,
)


@dataclass(frozen=True)
class BuildOutcome:
    lib_dir: Path
    include_dir: Path
    library_name: str


def configure_command(source_dir: Path, prefix_dir: Path) -> list[str]:
    return [str(source_dir / "configure"), *CONFIGURE_FLAGS, f"--prefix={prefix_dir}"]


def run_step(error_cls: type[BuildError], cmd: list[str], source_dir: Path) -> None:
    try:
        cp = hermetic.run(cmd, cwd=source_dir)
    except OSError as e:
        # Missing or non-executable; there is no exit status to report.
        raise error_cls(cmd, returncode=None, cwd=source_dir) from e

    if cp.returncode != 0:
        raise error_cls(cmd, returncode=cp.returncode, cwd=source_dir)


def build(source_dir: Path, prefix_dir: Path, platform_id: str, make: str = "make") -> BuildOutcome:
    """Patch, configure, compile and install the source tree into `prefix_dir`.

    Each step runs from within `source_dir` and must exit with status zero;
    the first failure aborts the build. Nothing is retried.
    """

    def say(msg: str):
        sez(msg, ctx="(build) ")

    try:
        patching.apply_patches(source_dir, platform_id)
    except PatchError as e:
        raise PatchFailedError(e) from e

    say(f"Configuring {source_dir.name} with prefix {prefix_dir}...")
    run_step(ConfigureFailedError, configure_command(source_dir, prefix_dir), source_dir)

    say("Compiling...")
    run_step(CompileFailedError, [make], source_dir)

    say("Installing...")
    run_step(InstallFailedError, [make, "install"], source_dir)

    return BuildOutcome(
        lib_dir=prefix_dir / "lib",
        include_dir=prefix_dir / "include",
        library_name=LINK_LIBRARY_NAME,
    )
