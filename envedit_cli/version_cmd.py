"""Version subcommand — extended version info beyond -V flag."""
from __future__ import annotations

import json
import sys
from importlib import metadata

from envedit.theme import theme as _theme
from envedit_cli.helpers import console, get_version

_DEPENDENCIES = ("rich", "PyYAML", "filelock", "questionary")


def cmd_version(json_output: bool = False):
    """Show version, Python version, and key dependency versions."""
    py_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

    deps: dict[str, str] = {}
    for pkg in _DEPENDENCIES:
        try:
            deps[pkg] = metadata.version(pkg)
        except metadata.PackageNotFoundError:
            deps[pkg] = "not installed"

    if json_output:
        print(json.dumps({
            "version": get_version(),
            "python": py_version,
            "dependencies": deps,
        }, indent=2))
        return

    out = console()
    out.print(f"{_theme.tag(_theme.heading, 'envedit')} {get_version()}")
    out.print(f"  python  {py_version}")
    for pkg, ver in deps.items():
        out.print(f"  {pkg:<12}{_theme.tag(_theme.muted, ver)}")
