"""
Tests for the batch exporter CLI.

Tests cover:
- Settings from command line flags
- Model and summary files written per run
- Failure collection and exit status
"""

import json

import pytest
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from open_model.export_all import build_parser, export_projects, main, settings_from_args
from open_model.config import ExportSettings


# ============== Fixtures ==============

@pytest.fixture
def project_file(tmp_path):
    snapshot = {
        "name": "crate",
        "parent": "item/generated",
        "textures": [{"name": "crate.png", "folder": "block", "uuid": "t"}],
        "elements": [{
            "uuid": "box", "name": "box",
            "from": [0, 0, 0], "to": [16, 16, 16],
            "faces": {"north": {"uv": [0, 0, 16, 16], "texture": 0}},
        }],
        "outliner": [{"name": "root", "children": ["box"]}],
    }
    path = tmp_path / "crate.bbmodel"
    path.write_text(json.dumps(snapshot))
    return path


# ============== Tests ==============

class TestSettingsFromArgs:
    """Test flag handling."""

    def test_flags(self):
        args = build_parser().parse_args(
            ["m.bbmodel", "--credit", "", "--no-groups", "--no-names", "--minify"]
        )
        settings = settings_from_args(args)
        assert settings.credit == ""
        assert settings.export_groups is False
        assert settings.export_cube_names is False
        assert settings.minified_output is True

    def test_settings_file(self, tmp_path):
        path = tmp_path / "settings.json"
        ExportSettings(credit="Studio").save(path)
        args = build_parser().parse_args(["m.bbmodel", "--settings", str(path)])
        assert settings_from_args(args).credit == "Studio"


class TestExportProjects:
    """Test batch export."""

    def test_exports_model(self, project_file, tmp_path):
        out = tmp_path / "out"
        summary = export_projects([project_file], ExportSettings(), out)

        assert summary["errors"] == []
        record = summary["projects"][0]
        assert record["status"] == "success"
        assert record["warnings"] == ["invalid_builtin_parent"]

        doc = json.loads((out / "crate.json").read_text())
        assert "parent" not in doc
        assert doc["textures"] == {"crate": "block/crate"}
        assert doc["groups"][0]["children"] == [0]

    def test_failure_collected(self, project_file, tmp_path):
        broken = tmp_path / "broken.bbmodel"
        broken.write_text("{not json")
        summary = export_projects([broken, project_file], ExportSettings(), tmp_path / "out")
        assert len(summary["errors"]) == 1
        assert summary["projects"][0]["status"] == "error"
        assert summary["projects"][1]["status"] == "success"

    def test_preview_written(self, project_file, tmp_path):
        pytest.importorskip("trimesh")
        out = tmp_path / "out"
        summary = export_projects([project_file], ExportSettings(), out, preview=True)
        assert summary["projects"][0]["preview"]["n_elements"] == 1
        assert (out / "crate.glb").exists()


class TestMain:
    """Test the command line entry point."""

    def test_writes_summary(self, project_file, tmp_path):
        out = tmp_path / "out"
        main([str(project_file), "-o", str(out), "--minify"])
        summary = json.loads((out / "run_summary.json").read_text())
        assert summary["format"] == "framework_open_model"
        assert summary["settings"]["minified_output"] is True
        assert "\n" not in (out / "crate.json").read_text()

    def test_exit_code_on_error(self, tmp_path):
        missing = tmp_path / "missing.bbmodel"
        with pytest.raises(SystemExit) as excinfo:
            main([str(missing), "-o", str(tmp_path / "out")])
        assert excinfo.value.code == 1
