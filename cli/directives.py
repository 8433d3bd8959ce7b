import click

from toolchain import BuildOutcome


def cargo_directives(outcome: BuildOutcome) -> list[str]:
    return [
        f"cargo:rustc-link-search=native={outcome.lib_dir}",
        f"cargo:rustc-link-lib=static={outcome.library_name}",
        f"cargo:include={outcome.include_dir}",
    ]


def emit(outcome: BuildOutcome) -> None:
    """Print the directives on stdout, where the invoking build reads them."""
    for line in cargo_directives(outcome):
        click.echo(line)
