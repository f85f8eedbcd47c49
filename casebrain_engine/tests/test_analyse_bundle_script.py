"""
Tests for scripts/analyse_bundle.py
===================================

Loads the script as a module and runs it over a temporary directory.
"""

import importlib.util
import json
from pathlib import Path

import pytest

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

SCRIPT_PATH = Path(__file__).parent.parent.parent / "scripts" / "analyse_bundle.py"


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location("analyse_bundle", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def bundle_dir(tmp_path):
    (tmp_path / "b_note.txt").write_text(
        "Attendance note. The client was not cautioned before being questioned.", encoding="utf-8"
    )
    (tmp_path / "a_record.json").write_text(json.dumps({
        "id": "rec-1",
        "name": "Custody record",
        "raw_text": "The detainee was refused a solicitor.",
    }), encoding="utf-8")
    (tmp_path / "c_meta.json").write_text(json.dumps({
        "criminalMeta": {"charges": [{"offence": "Assault ABH"}]},
    }), encoding="utf-8")
    (tmp_path / "ignored.pdf").write_bytes(b"%PDF-1.4")
    return tmp_path


class TestLoadDocuments:

    def test_loads_text_records_and_bare_extracts(self, script, bundle_dir):
        documents = script._load_documents(bundle_dir)

        assert [d.id for d in documents] == ["rec-1", "b_note", "c_meta"]
        assert documents[0].name == "Custody record"
        assert "not cautioned" in documents[1].raw_text
        assert documents[2].raw_text is None
        assert documents[2].structured_extract["criminalMeta"]["charges"][0]["offence"] == "Assault ABH"


class TestMain:

    def test_prints_analysis_json(self, script, bundle_dir, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["analyse_bundle.py", str(bundle_dir), "--category", "assault"])

        assert script.main() == 0

        output = json.loads(capsys.readouterr().out)
        assert output["category"] == "violence"
        assert output["documents"] == 3
        assert "gate" in output and "strategy" in output and "options" in output

    def test_missing_directory_returns_error(self, script, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["analyse_bundle.py", str(tmp_path / "nope")])

        assert script.main() == 1
        assert "Not a directory" in capsys.readouterr().err
