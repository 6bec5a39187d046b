"""Tests for the prd CLI commands."""

import json
from unittest.mock import patch

import pytest

from prdsmith.cli import build_parser, main
from prdsmith.pm.store import load_session


@pytest.fixture
def workdir(tmp_path):
    """Config dir with assessment disabled so no oracle is needed."""
    (tmp_path / "prdsmith.env").write_text("ASSESS_QUALITY=false\n")
    return tmp_path


def write_json(path, data):
    path.write_text(json.dumps(data))
    return str(path)


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_validate_flags(self):
        args = build_parser().parse_args(["validate", "prd.json", "--no-assess", "--json"])
        assert args.no_assess and args.json and not args.save


class TestDetect:
    def test_prints_dialect(self, workdir, capsys):
        path = write_json(workdir / "prd.json", {"feature_name": "Export", "user_stories": []})
        assert main(["-C", str(workdir), "detect", path]) == 0
        assert capsys.readouterr().out.strip() == "snake-case"

    def test_missing_file(self, workdir, capsys):
        assert main(["-C", str(workdir), "detect", str(workdir / "nope.json")]) == 2
        assert "ERROR: File not found" in capsys.readouterr().out


class TestValidate:
    def test_json_envelope(self, workdir, capsys, canonical_prd):
        path = write_json(workdir / "prd.json", canonical_prd)
        assert main(["-C", str(workdir), "validate", path, "--json"]) == 0
        envelope = json.loads(capsys.readouterr().out)
        assert envelope["valid"] is True
        assert envelope["transformed"] == canonical_prd

    def test_unrecognized_fails(self, workdir, capsys):
        path = write_json(workdir / "prd.json", {"foo": "bar"})
        assert main(["-C", str(workdir), "validate", path]) == 1
        out = capsys.readouterr().out
        assert "Format: unknown" in out
        assert "Unable to recognize PRD format" in out

    def test_save(self, workdir, capsys):
        raw = {"requirements": [{"id": "R1", "title": "CSV export"}], "name": "Export"}
        path = write_json(workdir / "prd.json", raw)
        assert main(["-C", str(workdir), "validate", path, "--save"]) == 0
        assert (workdir / ".prdsmith" / "prds" / "export.json").exists()
        assert "ID: R1 -> US-001" in capsys.readouterr().out

    @patch("prdsmith.pm.validation.assess_prd")
    def test_assessment_runs_when_enabled(self, mock_assess, tmp_path, canonical_prd):
        mock_assess.return_value = (None, False)
        path = write_json(tmp_path / "prd.json", canonical_prd)
        assert main(["-C", str(tmp_path), "validate", path]) == 0
        mock_assess.assert_called_once()


class TestRenderAndLibrary:
    def test_render(self, workdir, capsys, canonical_prd):
        path = write_json(workdir / "prd.json", canonical_prd)
        assert main(["-C", str(workdir), "render", path]) == 0
        assert capsys.readouterr().out.startswith("# PRD: Saved Searches")

    def test_list_and_show(self, workdir, capsys, canonical_prd):
        path = write_json(workdir / "prd.json", canonical_prd)
        main(["-C", str(workdir), "validate", path, "--save"])
        capsys.readouterr()

        assert main(["-C", str(workdir), "list"]) == 0
        assert "saved-searches" in capsys.readouterr().out

        assert main(["-C", str(workdir), "show", "saved-searches", "--summary"]) == 0
        assert "Feature: Saved Searches" in capsys.readouterr().out

    def test_show_missing(self, workdir, capsys):
        assert main(["-C", str(workdir), "show", "nope"]) == 1
        assert "not found" in capsys.readouterr().out


class TestChat:
    @patch("prdsmith.commands.chat.missing_binaries", return_value={})
    @patch("prdsmith.pm.conversation.run_claude")
    def test_interview_to_saved_prd(self, mock_claude, _missing, workdir, capsys, canonical_prd):
        final = "===PRD_START===\n" + json.dumps(canonical_prd) + "\n===PRD_END==="
        mock_claude.side_effect = [
            (True, "What problem are we solving?"),
            (True, final),
        ]
        with patch("builtins.input", side_effect=["Users rebuild searches"]):
            code = main(["-C", str(workdir), "chat", "--session", "s1"])

        assert code == 0
        assert (workdir / ".prdsmith" / "prds" / "saved-searches.json").exists()
        assert "PRD saved to:" in capsys.readouterr().out

    @patch("prdsmith.commands.chat.missing_binaries", return_value={})
    @patch("prdsmith.pm.conversation.run_claude", return_value=(True, "What problem are we solving?"))
    def test_park_saves_session(self, _claude, _missing, workdir, capsys):
        with patch("builtins.input", side_effect=["/park"]):
            assert main(["-C", str(workdir), "chat", "--session", "s2"]) == 0
        session = load_session(workdir / ".prdsmith", "s2")
        assert len(session.messages) == 2
        assert "prd chat --session s2" in capsys.readouterr().out

    @patch("prdsmith.commands.chat.missing_binaries", return_value={"claude": ["prd_chat"]})
    def test_missing_oracle(self, _missing, workdir, capsys):
        assert main(["-C", str(workdir), "chat"]) == 2
        assert "ERROR: Required tool 'claude'" in capsys.readouterr().out
