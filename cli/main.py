import sys

import click

import directives
import patching
import provisioning
from build_env import BuildEnv, host_platform_id
from constants import (
    DOWNLOAD_BASE_URL,
    ENV_BASE_URL,
    ENV_OUT_DIR,
    ENV_TARGET_OS,
    ENV_VERSION_MAJOR,
    ENV_VERSION_MINOR,
)
from provisioning_errors import ProvisioningError
from versioning import VersionSpec, resolve


@click.group()
def cli():
    pass


@cli.command()
@click.option("--major", envvar=ENV_VERSION_MAJOR, help="LAME major version, e.g. 3.")
@click.option("--minor", envvar=ENV_VERSION_MINOR, help="LAME minor version, e.g. 100.")
@click.option("--out-dir", envvar=ENV_OUT_DIR, help="Existing, writable work directory.")
@click.option(
    "--target-os",
    envvar=ENV_TARGET_OS,
    help="Platform whose source patches apply (default: the host).",
)
@click.option("--base-url", envvar=ENV_BASE_URL, help="Mirror to download tarballs from.")
def provision(major, minor, out_dir, target_os, base_url):
    """Download, build and install LAME, then print link directives."""
    try:
        env = BuildEnv.from_values(major, minor, out_dir, target_os, base_url)
        outcome = provisioning.provision(
            env.version_spec,
            env.work_root,
            platform_id=env.platform_id,
            base_url=env.base_url,
        )
    except ProvisioningError as e:
        click.echo(f"Error ({e.phase}): {e}", err=True)
        sys.exit(1)

    directives.emit(outcome)


@cli.command("resolve")
@click.argument("major")
@click.argument("minor")
@click.option("--base-url", envvar=ENV_BASE_URL, default=DOWNLOAD_BASE_URL, show_default=True)
def resolve_cmd(major, minor, base_url):
    """Show where the tarball for a version comes from."""
    try:
        location = resolve(VersionSpec(major=major, minor=minor), base_url=base_url)
    except ProvisioningError as e:
        click.echo(f"Error ({e.phase}): {e}", err=True)
        sys.exit(1)

    click.echo(f"file: {location.file_name}")
    click.echo(f"directory: {location.directory_name}")
    click.echo(f"url: {location.url}")


@cli.command()
@click.argument("platform_id", required=False)
def patches(platform_id):
    "List the source patches applied on a platform (default: the host)."
    platform_id = platform_id or host_platform_id()
    registered = patching.patches_for(platform_id)
    if not registered:
        click.echo(f"No patches for {platform_id}")
        return
    for patch in registered:
        click.echo(f"{patch.relpath}: {patch.reason}")


if __name__ == "__main__":
    cli()
