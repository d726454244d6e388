"""
envedit/snapshots.py
Snapshot history for .env files — automatic backup before writes, rollback.

Snapshots live under <backup_dir>/<file_name>/ next to a manifest.json.
Identical consecutive snapshots are skipped and only the newest
settings.max_backups() are kept, so operators can undo bad edits.
"""

from __future__ import annotations
import hashlib
import json
import logging
import os
import shutil
import time
from typing import Optional

from envedit import settings
from envedit.document import EnvDocument
from envedit.errors import EnvIOError, NotFoundError

logger = logging.getLogger(__name__)


def _file_hash(path: str) -> str:
    """SHA-256 of file contents (empty string if missing)."""
    try:
        with open(path, "rb") as f:
            return hashlib.sha256(f.read()).hexdigest()[:12]
    except FileNotFoundError:
        return ""


def _backup_subdir(env_path: str, backup_dir: Optional[str] = None) -> str:
    """Return backup subdirectory for an env file."""
    root = backup_dir or settings.backup_dir()
    if not os.path.isabs(root):
        root = os.path.join(os.path.dirname(os.path.abspath(env_path)), root)
    basename = os.path.basename(env_path).lstrip(".").replace(".", "_") or "env"
    return os.path.join(root, basename)


def snapshot(env_path: str, reason: str = "",
             backup_dir: Optional[str] = None, prune: bool = True) -> Optional[str]:
    """
    Save a timestamped byte copy of an env file.

    Returns:
        backup filename, or None if the file is missing or unchanged.
    """
    current_hash = _file_hash(env_path)
    if not current_hash:
        return None

    subdir = _backup_subdir(env_path, backup_dir)
    manifest = _load_manifest(subdir)
    if manifest and manifest[-1].get("hash") == current_hash:
        logger.debug("Env file %s unchanged — skipping snapshot", env_path)
        return None

    os.makedirs(subdir, exist_ok=True)

    ts = time.strftime("%Y%m%d_%H%M%S")
    backup_name = f"{ts}_{current_hash}.env"
    try:
        shutil.copy2(env_path, os.path.join(subdir, backup_name))
    except OSError as e:
        raise EnvIOError(f"Failed to snapshot {env_path}: {e}") from e

    manifest.append({
        "file": backup_name,
        "hash": current_hash,
        "timestamp": time.time(),
        "reason": reason,
    })

    # Prune old snapshots
    while prune and len(manifest) > settings.max_backups():
        old = manifest.pop(0)
        old_path = os.path.join(subdir, old["file"])
        if os.path.exists(old_path):
            os.remove(old_path)

    _save_manifest(subdir, manifest)
    logger.info("Env snapshot: %s → %s (%s)", env_path, backup_name, reason or "manual")
    return backup_name


def history(env_path: str, backup_dir: Optional[str] = None) -> list[dict]:
    """
    List available snapshots for an env file, oldest first.

    Returns list of dicts with: file, hash, timestamp, reason.
    """
    return _load_manifest(_backup_subdir(env_path, backup_dir))


def rollback(env_path: str, version: int = -1,
             backup_dir: Optional[str] = None) -> str:
    """
    Restore an env file from a snapshot and return the snapshot name.

    Args:
        version: index in history (-1 = latest snapshot, -2 = one before, etc.)

    The current file is snapshotted first, so a rollback is itself reversible.
    Raises NotFoundError when there is no such snapshot.
    """
    subdir = _backup_subdir(env_path, backup_dir)
    manifest = _load_manifest(subdir)
    if not manifest:
        raise NotFoundError(f"No snapshots found for {env_path}")

    try:
        entry = manifest[version]
    except IndexError:
        raise NotFoundError(
            f"Snapshot {version} out of range (have {len(manifest)})")

    backup_path = os.path.join(subdir, entry["file"])
    if not os.path.exists(backup_path):
        raise NotFoundError(f"Snapshot file missing: {backup_path}")

    snapshot(env_path, reason=f"pre-rollback to {entry['file']}",
             backup_dir=backup_dir, prune=False)

    EnvDocument(path=env_path).restore(backup_path)
    logger.info("Rolled back %s → %s", env_path, entry["file"])
    return entry["file"]


# ── Manifest helpers ─────────────────────────────────────────────────────────

def _manifest_path(subdir: str) -> str:
    return os.path.join(subdir, "manifest.json")


def _load_manifest(subdir: str) -> list[dict]:
    try:
        with open(_manifest_path(subdir)) as f:
            return json.load(f)
    except FileNotFoundError:
        return []
    except json.JSONDecodeError:
        logger.warning("Corrupt snapshot manifest in %s — starting fresh", subdir)
        return []


def _save_manifest(subdir: str, manifest: list[dict]):
    os.makedirs(subdir, exist_ok=True)
    with open(_manifest_path(subdir), "w") as f:
        json.dump(manifest, f, indent=2)
