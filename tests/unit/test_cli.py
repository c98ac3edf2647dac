"""Tests for the ce CLI (Click command-line interface)."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from cli.ce import cli
from reviewdesk.errors import TransportFailure
from reviewdesk.models import MatchHit, ReviewStatus, StatusRecord, VersionedContent, WriteAck
from reviewdesk.workstation import ReviewWorkstation


# ── Fakes ─────────────────────────────────────────────────────────────────


class FakeSearch:
    def __init__(self, hits: list[MatchHit]):
        self.hits = hits
        self.fail = False

    async def search(self, query, is_regex=False, glob=None):
        if self.fail:
            raise TransportFailure("search down")
        return list(self.hits)


class FakeFiles:
    def __init__(self, files: dict[str, str]):
        self.files = dict(files)

    async def read(self, path):
        return VersionedContent(content=self.files[path], version_token="v1")

    async def write(self, path, content, version_token):
        self.files[path] = content
        return WriteAck(accepted=True, new_version_token="v2")


class FakeChecklist:
    def __init__(self):
        self.records: dict[str, StatusRecord] = {}
        self.fail = False

    async def get_all(self):
        return dict(self.records)

    async def patch(self, path, status=None, note=None):
        if self.fail:
            raise TransportFailure("write refused")
        prev = self.records.get(path) or StatusRecord(artifact_id=path)
        record = prev.model_copy(update={
            "status": status if status is not None else prev.status,
            "note": note if note is not None else prev.note,
        })
        self.records[path] = record
        return record


class FakeAuthority:
    def __init__(self):
        self.search = FakeSearch([
            MatchHit(artifact_id="A.py", line=2, column=1, preview="foo = 1"),
            MatchHit(artifact_id="B.py", line=6, column=1, preview="foo()"),
        ])
        self.files = FakeFiles({"A.py": "a\nfoo = 1\n", "B.py": "b\n\n\n\n\nfoo()\n"})
        self.checklist = FakeChecklist()

    async def close(self):
        pass


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def authority(monkeypatch) -> FakeAuthority:
    """Route every command's workstation to an in-memory authority."""
    fake = FakeAuthority()
    monkeypatch.setattr("cli.ce.make_workstation", lambda config, **kwargs: ReviewWorkstation(fake, **kwargs))
    # Root handlers would otherwise keep CliRunner's captured stderr
    monkeypatch.setattr("cli.ce.setup_logging", lambda config: None)
    return fake


# ── Commands ──────────────────────────────────────────────────────────────


class TestSearchCommand:
    def test_search(self, runner, authority):
        result = runner.invoke(cli, ["search", "foo"])
        assert result.exit_code == 0, result.output
        assert "Files (2):" in result.output
        assert "A.py:2" in result.output
        assert "B.py:6" in result.output

    def test_search_failure(self, runner, authority):
        authority.search.fail = True
        result = runner.invoke(cli, ["search", "foo"])
        assert result.exit_code == 0
        assert "Search failed" in result.output
        assert "No files. Search or edit checklist." in result.output


class TestQueueCommand:
    def test_empty(self, runner, authority):
        result = runner.invoke(cli, ["queue"])
        assert result.exit_code == 0
        assert "No files. Search or edit checklist." in result.output

    def test_lists_checklist(self, runner, authority):
        authority.checklist.records["z.py"] = StatusRecord(artifact_id="z.py", status=ReviewStatus.DONE)
        result = runner.invoke(cli, ["queue"])
        assert "Files (1):" in result.output
        assert "● " in result.output
        assert "z.py:1" in result.output


class TestMarkAndNote:
    def test_mark(self, runner, authority):
        result = runner.invoke(cli, ["mark", "A.py", "done"])
        assert result.exit_code == 0, result.output
        assert "A.py -> done" in result.output
        assert authority.checklist.records["A.py"].status is ReviewStatus.DONE

    def test_mark_invalid_status(self, runner, authority):
        result = runner.invoke(cli, ["mark", "A.py", "finished"])
        assert result.exit_code == 2

    def test_note(self, runner, authority):
        result = runner.invoke(cli, ["note", "A.py", "check the loop"])
        assert result.exit_code == 0, result.output
        assert "Note saved for A.py" in result.output
        assert authority.checklist.records["A.py"].note == "check the loop"

    def test_mark_failure_exits_nonzero(self, runner, authority):
        authority.checklist.fail = True
        result = runner.invoke(cli, ["mark", "A.py", "done"])
        assert result.exit_code == 1
        assert "A.py -> done" not in result.output
        assert "Checklist update for A.py failed: write refused" in result.output

    def test_note_failure_exits_nonzero(self, runner, authority):
        authority.checklist.fail = True
        result = runner.invoke(cli, ["note", "A.py", "check the loop"])
        assert result.exit_code == 1
        assert "Note saved" not in result.output
        assert "Checklist update for A.py failed" in result.output


class TestReviewCommand:
    def test_done_and_next_then_quit(self, runner, authority):
        result = runner.invoke(cli, ["review", "foo"], input="d\nq\n")
        assert result.exit_code == 0, result.output
        assert "A.py  [in_progress]" in result.output
        assert "B.py  [in_progress]" in result.output
        assert authority.checklist.records["A.py"].status is ReviewStatus.DONE

    def test_walks_to_end_of_list(self, runner, authority):
        result = runner.invoke(cli, ["review", "foo"], input="n\nn\n")
        assert result.exit_code == 0, result.output
        assert "End of list" in result.output

    def test_no_matches(self, runner, authority):
        authority.search.hits = []
        result = runner.invoke(cli, ["review", "foo"])
        assert result.exit_code == 0
        assert "No files. Search or edit checklist." in result.output

    def test_edit_and_save(self, runner, authority, monkeypatch):
        monkeypatch.setattr("cli.ce.click.edit", lambda text, **kwargs: text + "# reviewed\n")
        result = runner.invoke(cli, ["review", "foo"], input="e\ns\nq\n")
        assert result.exit_code == 0, result.output
        assert "Saved successfully" in result.output
        assert authority.files.files["A.py"] == "a\nfoo = 1\n# reviewed\n"

    def test_quit_with_unsaved_changes_asks(self, runner, authority, monkeypatch):
        monkeypatch.setattr("cli.ce.click.edit", lambda text, **kwargs: "changed\n")
        result = runner.invoke(cli, ["review", "foo"], input="e\nq\ny\n")
        assert result.exit_code == 0, result.output
        assert "Unsaved" in result.output
        assert authority.files.files["A.py"] == "a\nfoo = 1\n"
