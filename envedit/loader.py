"""
envedit/loader.py
Inject .env entries into the process environment.

- Only Entry records are loaded; comments and raw lines are ignored
- Existing variables win unless override=True
- ${VAR} references are expanded against the environment and the keys
  loaded earlier from the same file; unknown references stay verbatim
"""

from __future__ import annotations

import logging
import os
import re
from typing import Iterable, MutableMapping, Optional

from envedit.parser import parse, read_env_file
from envedit.records import Entry

logger = logging.getLogger(__name__)

_REFERENCE = re.compile(r"\$\{([A-Za-z0-9_.:-]+)\}")


def expand(value: str, lookup: dict[str, str]) -> str:
    """Replace ${NAME} with lookup[NAME]; leave unresolved references alone."""
    def _sub(m: re.Match) -> str:
        return lookup.get(m.group(1), m.group(0))
    return _REFERENCE.sub(_sub, value)


def load_env(path: str = ".env", override: bool = False, expand_refs: bool = True,
             environ: Optional[MutableMapping[str, str]] = None) -> dict[str, str]:
    """
    Load KEY=VALUE entries from *path* into *environ* (default os.environ).

    Returns the key/value pairs that were actually written.
    Raises NotFoundError if the file is missing, ParseError if malformed.
    """
    target = os.environ if environ is None else environ
    records = parse(read_env_file(path))

    loaded: dict[str, str] = {}
    for record in records:
        if not isinstance(record, Entry):
            continue
        if not override and record.key in target:
            continue
        value = record.value
        if expand_refs:
            value = expand(value, {**target, **loaded})
        target[record.key] = value
        loaded[record.key] = value

    logger.info("Loaded %d variables from %s", len(loaded), path)
    return loaded


def load_env_files(paths: Iterable[str], override: bool = False,
                   environ: Optional[MutableMapping[str, str]] = None) -> dict[str, str]:
    """Load several files in order, skipping the ones that do not exist."""
    loaded: dict[str, str] = {}
    for path in paths:
        if not os.path.isfile(path):
            logger.debug("Skipping missing env file %s", path)
            continue
        loaded.update(load_env(path, override=override, environ=environ))
    return loaded
