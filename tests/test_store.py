"""Tests for PRD and session storage."""

import json

import pytest

from prdsmith.lib.validate import ValidationError
from prdsmith.pm.conversation import ChatSession
from prdsmith.pm.store import (
    format_parked_session,
    get_prds_dir,
    list_prds,
    load_prd,
    load_session,
    prd_slug,
    save_prd,
    save_session,
)
from prdsmith.transform import PRDDocument


@pytest.fixture
def document(canonical_prd):
    return PRDDocument.from_dict(canonical_prd)


class TestPrdStorage:
    def test_slug_from_branch(self, document):
        assert prd_slug(document) == "saved-searches"

    def test_save_writes_json_and_markdown(self, tmp_path, document, canonical_prd):
        path = save_prd(tmp_path, document)
        assert path == tmp_path / "prds" / "saved-searches.json"
        assert json.loads(path.read_text()) == canonical_prd
        assert path.with_suffix(".md").read_text().startswith("# PRD: Saved Searches")

    def test_save_refuses_invalid(self, tmp_path, canonical_prd):
        canonical_prd["userStories"][0]["id"] = "S1"
        with pytest.raises(ValidationError):
            save_prd(tmp_path, PRDDocument.from_dict(canonical_prd))
        assert not list(get_prds_dir(tmp_path).glob("*.json"))

    def test_load_round_trip(self, tmp_path, document):
        save_prd(tmp_path, document)
        assert load_prd(tmp_path, "saved-searches") == document

    def test_load_missing(self, tmp_path):
        assert load_prd(tmp_path, "nope") is None

    def test_load_non_canonical(self, tmp_path):
        prds_dir = get_prds_dir(tmp_path)
        prds_dir.mkdir(parents=True)
        (prds_dir / "broken.json").write_text('{"featureName": "x"}')
        (prds_dir / "garbage.json").write_text("{not json")
        assert load_prd(tmp_path, "broken") is None
        assert load_prd(tmp_path, "garbage") is None

    def test_list_skips_unreadable(self, tmp_path, document):
        save_prd(tmp_path, document)
        (get_prds_dir(tmp_path) / "broken.json").write_text("{}")
        prds = list_prds(tmp_path)
        assert [slug for slug, _ in prds] == ["saved-searches"]

    def test_list_empty(self, tmp_path):
        assert list_prds(tmp_path) == []


class TestSessionStorage:
    def test_round_trip(self, tmp_path):
        session = ChatSession()
        session.add_user("hi")
        session.add_assistant("Moving to Phase 2: Scope")
        save_session(tmp_path, "chat-1", session)

        restored = load_session(tmp_path, "chat-1")
        assert restored.phase == "scope"
        assert len(restored.messages) == 2

    def test_missing_session(self, tmp_path):
        assert load_session(tmp_path, "nope") is None

    def test_corrupt_session(self, tmp_path):
        (tmp_path / "sessions").mkdir()
        (tmp_path / "sessions" / "bad.json").write_text('{"messages": [{"role": "user"}]}')
        assert load_session(tmp_path, "bad") is None

    @pytest.mark.parametrize("content", ["[]", "\"text\"", "3"])
    def test_non_object_session(self, tmp_path, content):
        (tmp_path / "sessions").mkdir()
        (tmp_path / "sessions" / "odd.json").write_text(content)
        assert load_session(tmp_path, "odd") is None

    def test_format_parked_session(self):
        session = ChatSession()
        session.add_user("I want exports")
        session.add_assistant("Who needs them?")
        text = format_parked_session(session)
        assert text.startswith("Current phase: value")
        assert "User: I want exports" in text
        assert "Assistant: Who needs them?" in text
