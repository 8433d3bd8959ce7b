from pathlib import Path
from typing import Sequence
import os

from hermetic import shellize


class ProvisioningError(Exception):
    """Base class for everything that can abort provisioning.

    `phase` names the pipeline step that failed, so that the top-level
    caller can report it without re-running anything.
    """

    phase = "provision"


class ConfigurationError(ProvisioningError):
    phase = "configuration"


class FetchError(ProvisioningError):
    phase = "fetch"

    def __init__(self, msg: str, url: str | None = None):
        super().__init__(msg)
        self.url = url


class HttpStatusError(FetchError):
    def __init__(self, url: str, status_code: int, reason: str = ""):
        detail = f"{status_code} {reason}".strip()
        super().__init__(f"Server returned {detail} for {url}", url=url)
        self.status_code = status_code


class ExtractError(FetchError):
    pass


class MissingAfterExtractError(FetchError):
    def __init__(self, url: str, expected_dir: Path):
        super().__init__(
            f"Extracting {url} did not produce the expected directory {expected_dir}",
            url=url,
        )
        self.expected_dir = expected_dir


class PatchError(ProvisioningError):
    phase = "patch"

    def __init__(self, msg: str, path: Path):
        super().__init__(msg)
        self.path = path


class BuildError(ProvisioningError):
    phase = "build"

    def __init__(
        self,
        cmd: Sequence[str | os.PathLike[str]],
        returncode: int | None,
        cwd: Path | None = None,
    ):
        self.cmd = [str(x) for x in cmd]
        self.returncode = returncode
        self.cwd = cwd
        super().__init__(self._describe())

    def _describe(self) -> str:
        where = f" (in {self.cwd})" if self.cwd is not None else ""
        if self.returncode is None:
            outcome = "could not be started"
        else:
            outcome = f"exited with status {self.returncode}"
        return f"{self.phase} failed: `{shellize(self.cmd)}`{where} {outcome}"


class PatchFailedError(BuildError):
    phase = "patch"

    def __init__(self, cause: PatchError):
        self.cause = cause
        super().__init__(cmd=[], returncode=None, cwd=None)

    def _describe(self) -> str:
        return f"patch failed: {self.cause}"


class ConfigureFailedError(BuildError):
    phase = "configure"


class CompileFailedError(BuildError):
    phase = "compile"


class InstallFailedError(BuildError):
    phase = "install"
