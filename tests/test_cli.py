"""Tests for the CLI interface."""
import json
import subprocess
import sys
from pathlib import Path

import pytest

from stb_diff.config import ImportanceLevel, ImportancePolicy
from stb_diff.models import SectionData

CLI = [sys.executable, "-m", "stb_diff"]
ROOT = Path(__file__).parent.parent


def run_cli(*args: str) -> dict:
    """Run CLI command and return parsed JSON output."""
    result = subprocess.run(
        [*CLI, *args],
        capture_output=True, text=True, cwd=str(ROOT),
    )
    assert result.returncode == 0, f"CLI failed: {result.stderr}\n{result.stdout}"
    return json.loads(result.stdout)


def run_cli_expect_fail(*args: str) -> dict:
    """Run CLI command expecting failure, return parsed JSON output."""
    result = subprocess.run(
        [*CLI, *args],
        capture_output=True, text=True, cwd=str(ROOT),
    )
    assert result.returncode != 0
    return json.loads(result.stdout)


@pytest.fixture
def model_files(tmp_path, model_v202, model_v210):
    a = model_v202.save(tmp_path / "a.json")
    b = model_v210.save(tmp_path / "b.json")
    return str(a), str(b)


class TestCompare:
    def test_compare(self, model_files):
        data = run_cli("compare", *model_files)
        assert data["ok"] is True
        assert (data["version_a"], data["version_b"]) == ("2.0.2", "2.1.0")
        columns = data["element_types"]["Column"]
        assert sorted(p["key"] for p in columns["matched"]) == ["1", "2", "4"]
        assert columns["only_a"] == ["3"]
        assert columns["only_b"] == ["5"]
        assert data["summary"]["total_real_differences"] == 2
        assert [i["code"] for i in data["issues"]] == ["ambiguous_fallback_match"]

    def test_fallback_pair_reported(self, model_files):
        data = run_cli("compare", *model_files)
        girders = {p["key"]: p for p in data["element_types"]["Girder"]["matched"]}
        assert girders["101"]["type_mismatch"] is True
        assert girders["101"]["section"]["is_equivalent"] is False

    def test_guid_key(self, tmp_path):
        doc = {"version": "2.1.0", "elements": {"Column": [
            {"tag": "StbColumn", "id": "1", "guid": "g-1", "attributes": {"name": "C1"}},
        ]}}
        other = {"version": "2.1.0", "elements": {"Column": [
            {"tag": "StbColumn", "id": "7", "guid": "g-1", "attributes": {"name": "C1"}},
        ]}}
        (tmp_path / "a.json").write_text(json.dumps(doc))
        (tmp_path / "b.json").write_text(json.dumps(other))
        by_guid = run_cli("compare", str(tmp_path / "a.json"), str(tmp_path / "b.json"), "--key", "guid")
        assert len(by_guid["element_types"]["Column"]["matched"]) == 1
        by_id = run_cli("compare", str(tmp_path / "a.json"), str(tmp_path / "b.json"))
        assert by_id["element_types"]["Column"]["matched"] == []

    def test_position_key(self, tmp_path):
        def doc(ident, bottom, top):
            return {
                "version": "2.1.0",
                "nodes": {bottom: {"x": 0, "y": 0, "z": 0}, top: {"x": 0, "y": 0, "z": 3000}},
                "elements": {"Column": [{"tag": "StbColumn", "id": ident, "attributes": {
                    "id_node_bottom": bottom, "id_node_top": top,
                }}]},
            }
        (tmp_path / "a.json").write_text(json.dumps(doc("1", "n1", "n2")))
        (tmp_path / "b.json").write_text(json.dumps(doc("8", "m1", "m2")))
        data = run_cli("compare", str(tmp_path / "a.json"), str(tmp_path / "b.json"), "--key", "position")
        matched = data["element_types"]["Column"]["matched"]
        assert [p["key"] for p in matched] == ["0.000,0.000,0.000|0.000,0.000,3000.000"]

    def test_missing_file(self, tmp_path):
        data = run_cli_expect_fail("compare", str(tmp_path / "nope.json"), str(tmp_path / "nope.json"))
        assert data["ok"] is False
        assert "not found" in data["error"]

    def test_invalid_json_model(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"elements": "not a map"}')
        data = run_cli_expect_fail("compare", str(bad), str(bad))
        assert data["ok"] is False


class TestSummary:
    def test_summary_with_importance(self, tmp_path, model_files):
        policy = ImportancePolicy(name="S4", levels={"Column/rotate": ImportanceLevel.REQUIRED})
        policy_path = tmp_path / "s4.json"
        policy_path.write_text(policy.model_dump_json())
        data = run_cli("summary", *model_files, "--importance", str(policy_path))
        assert data["ok"] is True
        assert data["summary"]["importance_policy"] == "S4"
        assert data["summary"]["critical_differences"] == 1

    def test_summary_plain(self, model_files):
        data = run_cli("summary", *model_files)
        assert "by_importance" not in data["summary"]
        assert data["summary"]["total_version_differences"] == 1


class TestSection:
    def test_section(self, tmp_path):
        a = tmp_path / "a.json"
        b = tmp_path / "b.json"
        a.write_text(SectionData(section_type="H", dimensions={"A": 400, "B": 200, "t1": 8, "t2": 13}).model_dump_json())
        b.write_text(json.dumps({"dimensions": {
            "profile_hint": "H", "overall_depth": 400, "overall_width": 200,
            "web_thickness": 8, "flange_thickness": 13,
        }}))
        data = run_cli("section", str(a), str(b), "--element-type", "Girder")
        assert data["ok"] is True
        assert data["element_type"] == "Girder"
        assert data["is_equivalent"] is True
        assert data["pass_rate"] == 100.0
