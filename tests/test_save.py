"""
tests/test_save.py
Saving (atomic and direct), preview, backup and restore.
"""

import os
import stat

import pytest

from envedit.document import EnvDocument
from envedit.errors import NoTargetError, NotFoundError, SaveError
from envedit.parser import parse


def _leftover_temp_files(directory):
    return [name for name in os.listdir(directory) if name.startswith("envtmp_")]


class TestSave:

    def test_atomic_save_writes_preview(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.set("NEW_KEY", "value with space")
        doc.save()
        assert env_file.read_text(encoding="utf-8") == doc.preview()
        assert _leftover_temp_files(env_file.parent) == []

    def test_direct_save(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.set("APP_ENV", "dev")
        doc.save(atomic=False)
        assert "APP_ENV=dev" in env_file.read_text(encoding="utf-8")

    def test_save_to_other_path(self, env_file, tmp_path):
        doc = EnvDocument.from_file(str(env_file))
        target = tmp_path / "copy.env"
        doc.save(str(target))
        assert target.read_text(encoding="utf-8") == env_file.read_text(encoding="utf-8")
        assert doc.path == str(env_file)

    def test_unmodified_save_is_byte_identical(self, write_env):
        text = "# top\r\n\nexport A = 'x'   # c\nB=\"multi\nline\"\n"
        path = write_env(text)
        EnvDocument.from_file(str(path)).save()
        assert path.read_bytes() == text.replace("\r\n", "\n").encode("utf-8")

    def test_save_then_load_matches(self, tmp_path):
        path = tmp_path / "fresh.env"
        doc = EnvDocument(path=str(path))
        values = {"PLAIN": "abc", "SPACED": "a b", "QUOTE": 'say "hi"',
                  "SLASH": "C:\\tmp\\x", "HASH": "a#b",
                  "LINES": "one\ntwo"}
        doc.import_values(values)
        doc.save()
        assert EnvDocument.from_file(str(path)).to_dict() == values

    def test_quoted_backslashes_read_back_doubled(self, tmp_path):
        path = tmp_path / "win.env"
        doc = EnvDocument(path=str(path))
        doc.set("DIR", "C:\\Program Files")
        doc.save()
        assert path.read_text(encoding="utf-8") == 'DIR="C:\\\\Program Files"'
        assert EnvDocument.from_file(str(path)).get("DIR") == "C:\\\\Program Files"

    def test_no_target(self):
        doc = EnvDocument(parse("A=1"))
        with pytest.raises(NoTargetError):
            doc.save()

    def test_preview_does_not_write(self, env_file):
        before = env_file.read_bytes()
        doc = EnvDocument.from_file(str(env_file))
        doc.set("APP_ENV", "dev")
        doc.preview()
        assert env_file.read_bytes() == before

    def test_atomic_failure_keeps_target(self, env_file, monkeypatch):
        before = env_file.read_bytes()
        doc = EnvDocument.from_file(str(env_file))
        doc.set("APP_ENV", "dev")

        def boom(src, dst):
            raise OSError("rename refused")

        monkeypatch.setattr("envedit.document.os.replace", boom)
        with pytest.raises(SaveError):
            doc.save()
        assert env_file.read_bytes() == before
        assert _leftover_temp_files(env_file.parent) == []

    def test_save_into_missing_directory(self, tmp_path):
        doc = EnvDocument(parse("A=1"))
        with pytest.raises(SaveError):
            doc.save(str(tmp_path / "nope" / ".env"))

    def test_atomic_save_keeps_permissions(self, env_file):
        os.chmod(env_file, 0o640)
        doc = EnvDocument.from_file(str(env_file))
        doc.set("APP_ENV", "dev")
        doc.save()
        assert stat.S_IMODE(os.stat(env_file).st_mode) == 0o640


class TestBackupRestore:

    def test_backup_copies_bytes(self, env_file, tmp_path):
        doc = EnvDocument.from_file(str(env_file))
        backup = tmp_path / "main.env.bak"
        doc.backup(str(backup))
        assert backup.read_bytes() == env_file.read_bytes()

    def test_backup_ignores_unsaved_edits(self, env_file, tmp_path):
        doc = EnvDocument.from_file(str(env_file))
        doc.set("APP_ENV", "dev")
        backup = tmp_path / "main.env.bak"
        doc.backup(str(backup))
        assert "APP_ENV=production" in backup.read_text(encoding="utf-8")

    def test_restore_reloads(self, env_file, tmp_path):
        doc = EnvDocument.from_file(str(env_file))
        backup = tmp_path / "main.env.bak"
        doc.backup(str(backup))
        doc.set("APP_ENV", "dev")
        doc.save()

        doc.restore(str(backup))
        assert doc.get("APP_ENV") == "production"
        assert env_file.read_bytes() == backup.read_bytes()

    def test_backup_without_loaded_file(self, tmp_path):
        with pytest.raises(NoTargetError):
            EnvDocument().backup(str(tmp_path / "x.bak"))

    def test_backup_source_deleted(self, env_file, tmp_path):
        doc = EnvDocument.from_file(str(env_file))
        env_file.unlink()
        with pytest.raises(NotFoundError):
            doc.backup(str(tmp_path / "x.bak"))

    def test_restore_missing_backup(self, env_file, tmp_path):
        doc = EnvDocument.from_file(str(env_file))
        with pytest.raises(NotFoundError):
            doc.restore(str(tmp_path / "none.bak"))
        assert doc.get("APP_ENV") == "production"
