"""Tests for the command line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from hfn_discovery.adapters.storage import FileStorage
from hfn_discovery.cli import app
from hfn_discovery.core import PersistenceError

runner = CliRunner()


@pytest.fixture
def invoke(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run the CLI against an isolated data directory and the demo dataset."""
    monkeypatch.delenv("HFN_API_BASE_URL", raising=False)
    env = {"HFN_DATA_DIR": str(tmp_path / "data"), "HFN_LOG_LEVEL": "WARNING"}
    config_path = tmp_path / "config.yaml"
    
    def run(*args: str):
        return runner.invoke(app, ["--config", str(config_path), *args], env=env)
    
    return run


def test_saved_item_lifecycle(invoke) -> None:
    result = invoke("saved", "add", "job", "3", "Senior Full Stack Developer", "--tag", "tech")
    assert result.exit_code == 0
    assert "✓ Saved: Senior Full Stack Developer" in result.output
    
    result = invoke("saved", "add", "job", "3", "Senior Full Stack Developer")
    assert "Already saved" in result.output
    
    result = invoke("saved", "list")
    assert "Saved items: 1" in result.output
    assert "[job:3]" in result.output
    
    result = invoke("saved", "counts")
    assert "job: 1" in result.output
    assert "event: 0" in result.output
    assert "Total: 1" in result.output
    
    result = invoke("saved", "remove", "3")
    assert "✓ Removed: 3" in result.output
    
    result = invoke("saved", "list")
    assert "No saved items found." in result.output


def test_saved_add_rejects_blank_title(invoke) -> None:
    result = invoke("saved", "add", "post", "7", "   ")
    
    assert result.exit_code == 1
    assert "Invalid item" in result.output


def test_saved_clear_and_export(invoke, tmp_path: Path) -> None:
    invoke("saved", "add", "event", "4", "Startup Funding Masterclass", "--date", "2023-12-10")
    invoke("saved", "add", "group", "5", "Bangalore Tech Founders")
    
    output = tmp_path / "export" / "saved.md"
    result = invoke("saved", "export", "--output", str(output))
    assert result.exit_code == 0
    document = output.read_text(encoding="utf-8")
    assert "## 📅 Events (1)" in document
    assert "Dec 10, 2023" in document
    
    result = invoke("saved", "clear", "--yes")
    assert "✓ Cleared 2 saved items" in result.output


def test_search_with_facets(invoke) -> None:
    result = invoke("search", "tech", "--type", "event", "--tag", "ai")
    
    assert result.exit_code == 0
    assert "AI in Business: Practical Applications" in result.output
    assert "Bangalore Tech Founders" not in result.output
    assert "All (1)" in result.output


def test_blank_search_prompts_for_input(invoke) -> None:
    result = invoke("search")
    
    assert result.exit_code == 0
    assert "Enter a query or choose a filter" in result.output


def test_saved_search_round_trip(invoke) -> None:
    result = invoke("search", "fintech", "--save", "--save-results")
    assert result.exit_code == 0
    assert "Looking for co-founder with technical background" in result.output
    assert "✓ Saved 1 new items" in result.output
    
    saved_line = next(line for line in result.output.splitlines() if "Search saved:" in line)
    search_id = saved_line.split(":", 1)[1].strip()
    
    result = invoke("searches", "list")
    assert search_id in result.output
    assert '"fintech"' in result.output
    
    result = invoke("searches", "run", search_id)
    assert result.exit_code == 0
    assert '🔍 "fintech"' in result.output
    assert "★" in result.output
    
    result = invoke("searches", "recent")
    assert "• fintech" in result.output
    
    result = invoke("searches", "clear-recent")
    assert "✓ Recent searches cleared" in result.output
    
    result = invoke("searches", "delete", search_id)
    assert f"✓ Deleted search {search_id}" in result.output
    
    result = invoke("searches", "delete", search_id)
    assert result.exit_code == 1


def test_saved_remove_reports_write_failure(invoke, monkeypatch: pytest.MonkeyPatch) -> None:
    invoke("saved", "add", "job", "3", "Senior Full Stack Developer")
    
    def fail_save(self, data: bytes) -> None:
        raise PersistenceError("disk full")
    
    original_save = FileStorage.save
    monkeypatch.setattr(FileStorage, "save", fail_save)
    result = invoke("saved", "remove", "3")
    
    assert result.exit_code == 1
    assert "Could not remove item: disk full" in result.output
    assert "Nothing removed" not in result.output
    
    monkeypatch.setattr(FileStorage, "save", original_save)
    result = invoke("saved", "list")
    assert "[job:3]" in result.output
