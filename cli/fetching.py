from pathlib import Path
import tarfile
import zlib

import requests
import urllib3.exceptions

from hermetic import sez
from provisioning_errors import ExtractError, FetchError, HttpStatusError, MissingAfterExtractError


def fetch(url: str, destination_dir: Path, expected_dir: Path, ctx: str = "(fetch) ") -> None:
    """
    Streams the gzipped tarball at `url` and unpacks it into `destination_dir`.

    The response body is piped through gzip decompression and tar extraction
    one entry at a time; the archive is never held in memory or written to
    disk as a whole.

    Args:
        url: Location of the .tar.gz file.
        destination_dir: Directory to extract into; created if needed.
        expected_dir: Directory the archive is expected to unpack, checked
            after extraction.

    Cleaning up after a failure is left to the caller.
    """

    def say(msg: str):
        sez(msg, ctx)

    say(f"Downloading {url}...")
    try:
        response = requests.get(url, stream=True)
    except requests.exceptions.RequestException as e:
        raise FetchError(f"Failed to download {url}: {e}", url=url) from e

    with response:
        if not response.ok:
            raise HttpStatusError(url, response.status_code, response.reason or "")

        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FetchError(f"Cannot create {destination_dir}: {e}", url=url) from e
        say(f"Extracting to {destination_dir}...")

        # The payload is the .tar.gz itself; gunzip happens in tarfile.
        response.raw.decode_content = False
        try:
            with tarfile.open(fileobj=response.raw, mode="r|gz") as tar:
                tar.extractall(path=destination_dir, filter="tar")
        except (urllib3.exceptions.HTTPError, requests.exceptions.RequestException) as e:
            raise FetchError(f"Connection failed while reading {url}: {e}", url=url) from e
        except (tarfile.TarError, zlib.error, EOFError) as e:
            raise ExtractError(f"Could not unpack {url}: {e}", url=url) from e
        except OSError as e:
            raise ExtractError(f"Could not write extracted files from {url}: {e}", url=url) from e

    if not expected_dir.is_dir():
        raise MissingAfterExtractError(url, expected_dir)

    say(f"Download and extraction of {url.rsplit('/', 1)[-1]} completed successfully!")
