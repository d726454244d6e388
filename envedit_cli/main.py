#!/usr/bin/env python3
"""
envedit_cli/main.py  —  envedit command line
Usage:
  envedit                          # list entries of ./.env
  envedit list [--reveal]          # list entries (secrets masked)
  envedit get KEY                  # print one value
  envedit set KEY [VALUE]          # add or update (prompts if VALUE omitted)
      [--after K | --before K | --top] [--spacing N] [--dry-run]
  envedit unset KEY                # remove a key
  envedit check KEY...             # exit 1 if any key is missing
  envedit diff OTHER               # compare with another .env file
  envedit merge OTHER [--override] # copy keys from another .env file
  envedit backup DEST              # byte copy of the file
  envedit restore SOURCE           # copy SOURCE back over the file
  envedit history                  # list automatic snapshots
  envedit rollback [--version N]   # restore a snapshot (-1 = latest)
  envedit validate SCHEMA.yaml     # check required keys, rules and casts
  envedit version                  # version + dependency info

Global options:
  -f/--file PATH   target file (default: $ENVEDIT_FILE or .env)
  --json           machine-readable output
  --log-level L    DEBUG/INFO/WARNING/ERROR (default: $ENVEDIT_LOG_LEVEL)
"""

import argparse

from envedit import settings
from envedit.logging_config import setup_logging
from envedit_cli import dispatch_command
from envedit_cli.helpers import get_version


def _add_write_flags(p: argparse.ArgumentParser):
    p.add_argument("--no-atomic", action="store_true",
                   help="Overwrite the file in place instead of temp-file + rename")
    p.add_argument("--dry-run", action="store_true",
                   help="Print the resulting file instead of saving it")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="envedit",
                                     description="Format-preserving .env editor")
    parser.add_argument("-V", "--version", action="version",
                        version=f"envedit {get_version()}")
    parser.add_argument("-f", "--file", default=settings.env_file(),
                        help="Path to the .env file")
    parser.add_argument("--json", action="store_true",
                        help="Machine-readable JSON output")
    parser.add_argument("--log-level", default=settings.log_level(),
                        help="Log level (DEBUG/INFO/WARNING/ERROR)")
    sub = parser.add_subparsers(dest="cmd")

    p_list = sub.add_parser("list", help="List entries")
    p_list.add_argument("--reveal", action="store_true",
                        help="Show secret-looking values unmasked")

    p_get = sub.add_parser("get", help="Print one value")
    p_get.add_argument("key")

    p_set = sub.add_parser("set", help="Add or update a key")
    p_set.add_argument("key")
    p_set.add_argument("value", nargs="?", default=None,
                       help="Value (prompted for when omitted)")
    where = p_set.add_mutually_exclusive_group()
    where.add_argument("--after", metavar="KEY", help="Insert after KEY")
    where.add_argument("--before", metavar="KEY", help="Insert before KEY")
    where.add_argument("--top", action="store_true", help="Insert at the top")
    where.add_argument("--bottom", action="store_true",
                       help="Insert at the bottom (default)")
    p_set.add_argument("--spacing", type=int, default=0,
                       help="Blank lines to insert before a new key")
    _add_write_flags(p_set)

    p_unset = sub.add_parser("unset", help="Remove a key")
    p_unset.add_argument("key")
    _add_write_flags(p_unset)

    p_check = sub.add_parser("check", help="Exit 1 if any key is missing")
    p_check.add_argument("keys", nargs="+")

    p_diff = sub.add_parser("diff", help="Compare with another .env file")
    p_diff.add_argument("other")
    p_diff.add_argument("--reveal", action="store_true")

    p_merge = sub.add_parser("merge", help="Copy keys from another .env file")
    p_merge.add_argument("other")
    p_merge.add_argument("--override", action="store_true",
                         help="Overwrite keys that already exist")
    _add_write_flags(p_merge)

    p_backup = sub.add_parser("backup", help="Copy the file to DEST")
    p_backup.add_argument("dest")

    p_restore = sub.add_parser("restore", help="Copy SOURCE over the file")
    p_restore.add_argument("source")

    sub.add_parser("history", help="List automatic snapshots")

    p_rb = sub.add_parser("rollback", help="Restore an automatic snapshot")
    p_rb.add_argument("--version", type=int, default=-1,
                      help="Snapshot index (-1 = latest, -2 = one before, ...)")

    p_val = sub.add_parser("validate", help="Validate against a YAML schema")
    p_val.add_argument("schema")
    p_val.add_argument("--write", action="store_true",
                       help="Save backfilled optional defaults")
    p_val.add_argument("--reveal", action="store_true")

    sub.add_parser("version", help="Version and dependency info")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, log_dir=settings.log_dir())
    dispatch_command(args)


if __name__ == "__main__":
    main()
