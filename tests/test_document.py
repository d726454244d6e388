"""
tests/test_document.py
EnvDocument — lookup, positioned insertion, update-in-place, remove, diff, merge.
"""

import pytest

from envedit.document import EnvDocument, Position, ValueChange
from envedit.errors import NotFoundError, ParseError
from envedit.parser import parse
from envedit.records import Comment, Entry


def _doc(text: str) -> EnvDocument:
    return EnvDocument(parse(text))


def _keys(doc: EnvDocument) -> list:
    return doc.keys()


class TestLoad:

    def test_load_and_lookup(self, env_file):
        doc = EnvDocument()
        doc.load(str(env_file))
        values = doc.to_dict()
        assert values["APP_NAME"] == "MyApp"
        assert values["APP_ENV"] == "production"
        assert values["DB_HOST"] == "localhost"
        assert doc.path == str(env_file)

    def test_multiline_value_loaded(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        key = doc.get("PRIVATE_KEY")
        assert key == "-----BEGIN---\nLINE1\nLINE2\n-----END---"

    def test_preview_round_trip(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        assert doc.preview() == env_file.read_text(encoding="utf-8")

    def test_inline_comment_preserved(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        assert "APP_NAME=MyApp # inline" in doc.preview()

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            EnvDocument().load(str(tmp_path / "missing.env"))

    def test_directory_is_not_a_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EnvDocument().load(str(tmp_path))

    def test_failed_load_keeps_previous_state(self, env_file, write_env):
        doc = EnvDocument.from_file(str(env_file))
        bad = write_env('K="never closed', name="bad.env")
        with pytest.raises(ParseError):
            doc.load(str(bad))
        assert doc.path == str(env_file)
        assert doc.get("APP_ENV") == "production"


class TestQueries:

    def test_has_and_get(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        assert doc.has("APP_ENV")
        assert not doc.has("XYZ")
        assert doc.get("XYZ") is None
        assert doc.get("XYZ", "fallback") == "fallback"

    def test_missing_keys_keeps_input_order(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        assert doc.missing_keys(["APP_ENV", "XYZ"]) == ["XYZ"]
        assert doc.missing_keys(["Z", "DB_HOST", "Y"]) == ["Z", "Y"]

    def test_records_are_a_snapshot(self):
        doc = _doc("A=1")
        records = doc.records
        doc.set("B", "2")
        assert len(records) == 1
        assert len(doc) == 2


class TestSetUpdate:

    def test_update_in_place_keeps_inline_comment(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.set("APP_NAME", "Other")
        assert "APP_NAME=Other # inline" in doc.preview()
        assert doc.get("APP_NAME") == "Other"

    def test_update_keeps_order(self):
        doc = _doc("A=1\nB=2\nC=3")
        doc.set("B", "20")
        assert _keys(doc) == ["A", "B", "C"]
        assert doc.preview() == "A=1\nB=20\nC=3"

    def test_update_ignores_position_and_spacing(self):
        doc = _doc("A=1\nB=2")
        doc.set("B", "3", position="top", spacing=2)
        assert doc.preview() == "A=1\nB=3"

    def test_update_quotes_when_needed(self):
        doc = _doc("A=1")
        doc.set("A", "two words")
        assert doc.preview() == 'A="two words"'
        assert doc.get("A") == "two words"

    def test_update_multiline_entry(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.set("PRIVATE_KEY", "short")
        assert doc.preview().endswith("PRIVATE_KEY=short")

    def test_update_drops_export_prefix(self):
        doc = _doc("export A=1")
        doc.set("A", "2")
        assert doc.preview() == "A=2"

    def test_empty_value_with_inline_comment(self):
        doc = _doc("A=1 # keep")
        doc.set("A", "")
        assert doc.preview() == 'A="" # keep'
        assert parse(doc.preview())[0].value == ""

    def test_idempotent(self, env_file):
        once = EnvDocument.from_file(str(env_file))
        once.set("NEW", "v a l")
        once.set("APP_ENV", "dev")
        twice = EnvDocument.from_file(str(env_file))
        for _ in range(2):
            twice.set("NEW", "v a l")
            twice.set("APP_ENV", "dev")
        assert once.preview() == twice.preview()

    def test_invalid_key_rejected(self):
        doc = _doc("")
        with pytest.raises(ParseError):
            doc.set("BAD KEY", "1")
        assert doc.preview() == ""


class TestSetInsert:

    def test_default_appends(self):
        doc = _doc("A=1")
        doc.set("B", "2")
        assert doc.preview() == "A=1\nB=2"

    def test_positions(self):
        doc = _doc("A=1\nB=1\nC=1")
        doc.after("A").set("X", "1")
        assert _keys(doc) == ["A", "X", "B", "C"]
        doc.before("C").set("Y", "1")
        assert _keys(doc) == ["A", "X", "B", "Y", "C"]
        doc.top().set("Z", "1")
        assert _keys(doc) == ["Z", "A", "X", "B", "Y", "C"]
        doc.bottom().set("W", "1")
        assert _keys(doc) == ["Z", "A", "X", "B", "Y", "C", "W"]

    def test_spacing_inserts_blank_records(self):
        doc = _doc("A=1\nB=2")
        doc.after("A").spacing(2).set("N", "1")
        records = doc.records
        assert records[1] == Comment("")
        assert records[2] == Comment("")
        assert isinstance(records[3], Entry) and records[3].key == "N"
        assert doc.preview() == "A=1\n\n\nN=1\nB=2"

    def test_spacing_before_position(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.spacing(2).after("DB_HOST").set("DB_PORT_EXTRA", "3307")
        assert "DB_HOST=localhost\n\n\nDB_PORT_EXTRA=3307" in doc.preview()

    def test_top_and_bottom_in_file(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.top().set("FIRST", "1")
        doc.bottom().set("LAST", "9")
        preview = doc.preview()
        assert preview.startswith("FIRST=1")
        assert preview.endswith("LAST=9")

    def test_missing_reference_key_appends(self):
        doc = _doc("A=1\nB=2")
        doc.after("NOPE").set("X", "1")
        doc.before("NOPE").set("Y", "1")
        assert _keys(doc) == ["A", "B", "X", "Y"]

    def test_after_skips_comments_between(self):
        doc = _doc("A=1\n# about B\nB=2")
        doc.after("A").set("X", "1")
        assert doc.preview() == "A=1\nX=1\n# about B\nB=2"

    def test_placement_does_not_leak(self):
        doc = _doc("A=1\nB=2")
        doc.top()
        doc.after("A").spacing(3)
        doc.set("C", "3")
        assert doc.preview() == "A=1\nB=2\nC=3"

    def test_placement_consumed_on_update(self):
        doc = _doc("A=1\nB=2")
        placement = doc.top().spacing(1)
        placement.set("B", "5")
        doc.set("C", "3")
        assert doc.preview() == "A=1\nB=5\nC=3"

    def test_explicit_position_arguments(self):
        doc = _doc("A=1\nB=2")
        doc.set("T", "0", position="top")
        doc.set("M", "1", position={"after": "A"})
        doc.set("N", "1", position=Position(before="B"), spacing=1)
        assert doc.preview() == "T=0\nA=1\nM=1\n\nN=1\nB=2"

    def test_new_value_is_formatted(self):
        doc = _doc("")
        doc.set("GREETING", "hello world")
        assert doc.preview().endswith('GREETING="hello world"')


class TestRemove:

    def test_remove_key(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.remove("DB_HOST")
        assert "DB_HOST" not in doc.preview()
        assert "# DB Section" in doc.preview()

    def test_remove_missing_is_noop(self):
        doc = _doc("# c\nA=1")
        assert doc.remove("NOPE") is doc
        assert doc.preview() == "# c\nA=1"

    def test_remove_all_duplicates(self):
        doc = _doc("A=1\nB=2\nA=3")
        doc.remove("A")
        assert doc.preview() == "B=2"

    def test_has_after_remove(self):
        doc = _doc("")
        doc.set("K", "v")
        assert doc.has("K")
        doc.remove("K")
        assert not doc.has("K")


class TestImport:

    def test_import_values(self, env_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.import_values({"A": "1", "B": 2, "APP_ENV": "dev"})
        values = doc.to_dict()
        assert values["A"] == "1"
        assert values["B"] == "2"
        assert values["APP_ENV"] == "dev"
        assert doc.preview().endswith("A=1\nB=2")

    def test_import_keeps_unique_keys(self):
        doc = _doc("A=1")
        doc.import_values({"A": "2"})
        doc.import_values({"A": "3"})
        assert doc.keys() == ["A"]


class TestDiff:

    def test_diff_example(self, write_env):
        current = write_env("APP_ENV=production\nDB_HOST=localhost", "current.env")
        other = write_env("APP_ENV=staging\nDB_USER=root", "other.env")
        result = EnvDocument.from_file(str(current)).diff(str(other))
        assert result.missing_in_current == {"DB_USER": "root"}
        assert result.extra_in_current == {"DB_HOST": "localhost"}
        assert result.changed == {
            "APP_ENV": ValueChange(current="production", other="staging")}
        assert result.changed["APP_ENV"].other == "staging"

    def test_diff_against_file(self, env_file, other_file):
        doc = EnvDocument.from_file(str(env_file))
        result = doc.diff(str(other_file))
        assert result.missing_in_current["DB_USER"] == "root"
        assert result.extra_in_current["DB_HOST"] == "localhost"
        assert result.changed["APP_ENV"].current == "production"
        assert "APP_NAME" not in result.changed

    def test_diff_uses_current_state(self, write_env):
        current = write_env("A=1", "a.env")
        other = write_env("A=2", "b.env")
        doc = EnvDocument.from_file(str(current))
        doc.set("A", "2")
        assert doc.diff(str(other)).is_empty

    def test_diff_to_dict(self, write_env):
        current = write_env("A=1", "a.env")
        other = write_env("A=2", "b.env")
        data = EnvDocument.from_file(str(current)).diff(str(other)).to_dict()
        assert data["changed"] == {"A": {"current": "1", "other": "2"}}

    def test_diff_does_not_mutate(self, env_file, other_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.diff(str(other_file))
        assert doc.preview() == env_file.read_text(encoding="utf-8")

    def test_diff_missing_file(self, env_file, tmp_path):
        doc = EnvDocument.from_file(str(env_file))
        with pytest.raises(NotFoundError):
            doc.diff(str(tmp_path / "nope.env"))


class TestMerge:

    def test_merge_without_override(self, env_file, other_file):
        doc = EnvDocument.from_file(str(env_file))
        applied = doc.merge(str(other_file))
        values = doc.to_dict()
        assert values["APP_ENV"] == "production"
        assert values["DB_USER"] == "root"
        assert applied == ["DB_USER", "REDIS_HOST"]

    def test_merge_with_override(self, env_file, other_file):
        doc = EnvDocument.from_file(str(env_file))
        doc.merge(str(other_file), override_existing=True)
        assert doc.get("APP_ENV") == "staging"
        assert doc.keys().count("APP_ENV") == 1

    def test_merge_missing_file_applies_nothing(self, env_file, tmp_path):
        doc = EnvDocument.from_file(str(env_file))
        with pytest.raises(NotFoundError):
            doc.merge(str(tmp_path / "nope.env"))
        assert doc.preview() == env_file.read_text(encoding="utf-8")

    def test_merge_malformed_file_applies_nothing(self, env_file, write_env):
        doc = EnvDocument.from_file(str(env_file))
        bad = write_env('NEW=1\nK="open', "bad.env")
        with pytest.raises(ParseError):
            doc.merge(str(bad))
        assert not doc.has("NEW")
