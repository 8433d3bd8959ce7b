import subprocess
import shlex
import os
from pathlib import Path
from typing import Sequence, TypeAlias

import click

from constants import ENV_SHOW_CMDS


RunSpec: TypeAlias = Sequence[str | os.PathLike[str]]


def sez(msg: str, ctx: str, err=False):
    click.echo("LAME SEZ: " + ctx + msg, err=err)


def shellize(cmd: RunSpec) -> str:
    if isinstance(cmd, str):
        return cmd
    else:
        return " ".join(shlex.quote(str(x)) for x in cmd)


def show_cmds() -> bool:
    return os.environ.get(ENV_SHOW_CMDS, "0") != "0"


def common_helper_for_run(cmd: RunSpec, cmd_cwd: Path | str | None = None):
    def print_cmd_only():
        click.echo(f": {shellize(cmd)}", err=True)

    def print_cmd_within(cdpath: Path):
        click.echo(f": ( cd {cdpath.as_posix()} ; {shellize(cmd)} )", err=True)

    if not show_cmds():
        return

    if os.environ.get("PWD") is None or cmd_cwd is None:
        print_cmd_only()
        return

    invoked_from = Path(os.environ["PWD"]).resolve()
    cmd_cwd = Path(cmd_cwd).resolve()
    if cmd_cwd == invoked_from:
        print_cmd_only()
    else:
        try:
            cdpath = cmd_cwd.relative_to(invoked_from)
            print_cmd_within(cdpath)
        except ValueError:
            print_cmd_within(cmd_cwd)


def run(cmd: RunSpec, check=False, **kwargs) -> subprocess.CompletedProcess:
    """Run an external command, letting its stdout/stderr pass straight through.

    The caller's environment is inherited unchanged.
    """
    common_helper_for_run(cmd, kwargs.get("cwd", None))

    return subprocess.run(cmd, check=check, **kwargs)
