from dataclasses import dataclass

from packaging.version import InvalidVersion, Version

from constants import DOWNLOAD_BASE_URL, LIBRARY_ID
from provisioning_errors import ConfigurationError


@dataclass(frozen=True)
class VersionSpec:
    major: str
    minor: str

    def __post_init__(self):
        for label, value in (("major", self.major), ("minor", self.minor)):
            if not isinstance(value, str) or value == "":
                raise ConfigurationError(f"LAME {label} version component is missing")
            if value != value.strip() or any(c in value for c in "./\\"):
                raise ConfigurationError(
                    f"LAME {label} version component {value!r} is malformed"
                )
        try:
            Version(self.version_string)
        except InvalidVersion as e:
            raise ConfigurationError(f"'{self.version_string}' is not a valid version") from e

    @property
    def version_string(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass(frozen=True)
class ArchiveLocation:
    file_name: str
    directory_name: str
    url: str


def resolve(
    spec: VersionSpec,
    base_url: str = DOWNLOAD_BASE_URL,
    library_id: str = LIBRARY_ID,
) -> ArchiveLocation:
    """Maps a version onto the upstream tarball, e.g. 3.100 ->
    .../3.100/lame-3.100.tar.gz, which unpacks into lame-3.100/."""
    version = spec.version_string
    directory_name = f"{library_id}-{version}"
    file_name = f"{directory_name}.tar.gz"
    url = f"{base_url.rstrip('/')}/{version}/{file_name}"
    return ArchiveLocation(file_name=file_name, directory_name=directory_name, url=url)
