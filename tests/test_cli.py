"""
Command line interface tests.
"""

import json

import pytest

from contactgraph.__main__ import main


@pytest.fixture
def contacts_file(tmp_path):
    path = tmp_path / "contacts.json"
    path.write_text(json.dumps([
        {"id": "a", "name": "Alice", "hashtags": ["sf", "pm"]},
        {"id": "b", "name": "Bob", "hashtags": ["sf"]},
    ]))
    return path


@pytest.fixture(autouse=True)
def cli_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("CONTACTGRAPH_CACHE_PATH", str(tmp_path / "cli_cache.db"))
    monkeypatch.setenv("CONTACTGRAPH_LAYOUT_ITERATIONS", "30")


class TestCli:

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_layout_writes_payload(self, contacts_file, tmp_path):
        output = tmp_path / "graph.json"

        assert main(["layout", str(contacts_file), "-o", str(output), "--query", "sf"]) == 0

        payload = json.loads(output.read_text())
        assert payload["metadata"]["contact_count"] == 2
        assert payload["metadata"]["search_query"] == "sf"
        assert {n["id"] for n in payload["nodes"] if n["highlighted"]} == {"contact:a", "contact:b", "tag:sf"}

    def test_search_prints_highlight(self, contacts_file, capsys):
        assert main(["search", str(contacts_file), "pm"]) == 0
        out = capsys.readouterr().out
        assert "Alice" in out
        assert "pm" in out

    def test_search_without_match(self, contacts_file):
        assert main(["search", str(contacts_file), "zzz"]) == 1

    def test_rank(self, contacts_file, capsys):
        assert main(["rank", str(contacts_file)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert "Alice" in lines[0]
        assert "Bob" in lines[1]

    def test_missing_contacts_file(self, tmp_path, capsys):
        assert main(["layout", str(tmp_path / "missing.json")]) == 1
        assert "Error" in capsys.readouterr().out

    def test_render(self, contacts_file, tmp_path):
        output = tmp_path / "graph.png"

        assert main(["render", str(contacts_file), str(output), "--query", "alice"]) == 0
        assert output.exists()
        assert output.read_bytes()[:4] == b"\x89PNG"

    def test_cache_commands(self, capsys):
        assert main(["cache", "stats"]) == 0
        assert "Entries" in capsys.readouterr().out
        assert main(["cache", "prune", "--days", "1"]) == 0
        assert main(["cache", "clear"]) == 0

    def test_invalid_configuration(self, contacts_file, monkeypatch, capsys):
        monkeypatch.setenv("CONTACTGRAPH_ANIMATOR", "bounce")

        assert main(["rank", str(contacts_file)]) == 1
        assert "Invalid configuration" in capsys.readouterr().out
