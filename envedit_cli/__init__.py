"""CLI dispatcher — lazy-loads command modules on demand."""
from __future__ import annotations

import logging

from envedit.errors import DotenvError

logger = logging.getLogger("envedit.cli")


def dispatch_command(args):
    """Route args.cmd to the appropriate cli module, importing only on use."""
    try:
        _dispatch(args)
    except DotenvError as e:
        from envedit_cli.helpers import fail
        logger.debug("Command %s failed", getattr(args, "cmd", None), exc_info=True)
        fail(str(e))


def _dispatch(args):
    cmd = getattr(args, "cmd", None)
    path = args.file
    json_output = getattr(args, "json", False)

    if cmd == "list":
        from envedit_cli.edit_cmd import cmd_list
        cmd_list(path, reveal=args.reveal, json_output=json_output)

    elif cmd == "get":
        from envedit_cli.edit_cmd import cmd_get
        cmd_get(path, args.key, json_output=json_output)

    elif cmd == "set":
        from envedit_cli.edit_cmd import cmd_set
        cmd_set(path, args.key, args.value,
                after=args.after or "", before=args.before or "",
                top=args.top, bottom=args.bottom, spacing=args.spacing,
                atomic=not args.no_atomic, dry_run=args.dry_run)

    elif cmd == "unset":
        from envedit_cli.edit_cmd import cmd_unset
        cmd_unset(path, args.key, atomic=not args.no_atomic,
                  dry_run=args.dry_run)

    elif cmd == "check":
        from envedit_cli.edit_cmd import cmd_check
        cmd_check(path, args.keys, json_output=json_output)

    elif cmd == "diff":
        from envedit_cli.compare_cmd import cmd_diff
        cmd_diff(path, args.other, reveal=args.reveal, json_output=json_output)

    elif cmd == "merge":
        from envedit_cli.compare_cmd import cmd_merge
        cmd_merge(path, args.other, override=args.override,
                  atomic=not args.no_atomic, dry_run=args.dry_run,
                  json_output=json_output)

    elif cmd == "backup":
        from envedit_cli.backup_cmd import cmd_backup
        cmd_backup(path, args.dest)

    elif cmd == "restore":
        from envedit_cli.backup_cmd import cmd_restore
        cmd_restore(path, args.source)

    elif cmd == "history":
        from envedit_cli.backup_cmd import cmd_history
        cmd_history(path, json_output=json_output)

    elif cmd == "rollback":
        from envedit_cli.backup_cmd import cmd_rollback
        cmd_rollback(path, version=args.version)

    elif cmd == "validate":
        from envedit_cli.validate_cmd import cmd_validate
        cmd_validate(path, args.schema, write=args.write, reveal=args.reveal,
                     json_output=json_output)

    elif cmd == "version":
        from envedit_cli.version_cmd import cmd_version
        cmd_version(json_output=json_output)

    else:
        # No subcommand: show what is in the file
        from envedit_cli.edit_cmd import cmd_list
        cmd_list(path, json_output=json_output)
