"""Tests for difference summaries."""

from stb_diff.comparison.model import compare_models
from stb_diff.comparison.summary import (
    generate_comparison_statistics,
    generate_version_difference_summary,
)
from stb_diff.config import ImportanceLevel, ImportancePolicy


class TestVersionDifferenceSummary:
    def test_totals(self, model_v202, model_v210):
        summary = generate_version_difference_summary(compare_models(model_v202, model_v210))
        assert summary["total_real_differences"] == 2
        assert summary["total_version_differences"] == 1
        assert summary["by_element_type"]["Column"] == {"real_differences": 1, "version_differences": 1}
        assert summary["by_element_type"]["Girder"] == {"real_differences": 1, "version_differences": 0}
        assert "by_importance" not in summary

    def test_plain_mapping(self):
        summary = generate_version_difference_summary({
            "Column": {"differences": [{"attribute": "rotate"}], "version_only_differences": []},
            "Slab": {"differences": [], "version_only_differences": [{}, {}]},
        })
        assert summary["total_real_differences"] == 1
        assert summary["total_version_differences"] == 2

    def test_empty(self):
        summary = generate_version_difference_summary({})
        assert summary == {
            "total_real_differences": 0,
            "total_version_differences": 0,
            "by_element_type": {},
        }

    def test_importance_weighting(self, model_v202, model_v210):
        policy = ImportancePolicy(
            name="S4",
            levels={"Column/rotate": ImportanceLevel.REQUIRED, "Girder": ImportanceLevel.UNNECESSARY},
        )
        comparison = compare_models(model_v202, model_v210)
        summary = generate_version_difference_summary(comparison, importance=policy)
        assert summary["importance_policy"] == "S4"
        assert summary["critical_differences"] == 1
        assert summary["by_importance"]["required"] == 1
        assert summary["by_importance"]["unnecessary"] == 1
        assert summary["by_importance"]["optional"] == 0

    def test_policy_change_keeps_counts(self, model_v202, model_v210):
        """Re-weighting never changes the totals."""
        comparison = compare_models(model_v202, model_v210)
        plain = generate_version_difference_summary(comparison)
        weighted = generate_version_difference_summary(comparison, importance=ImportancePolicy())
        assert weighted["total_real_differences"] == plain["total_real_differences"]
        assert sum(weighted["by_importance"].values()) == plain["total_real_differences"]


class TestComparisonStatistics:
    def test_counts(self, model_v202, model_v210):
        stats = generate_comparison_statistics(compare_models(model_v202, model_v210))
        column = stats["by_element_type"]["Column"]
        assert (column["matched"], column["only_a"], column["only_b"]) == (3, 1, 1)
        assert column["changed"] == 1
        girder = stats["by_element_type"]["Girder"]
        assert girder["fallback_matches"] == 1
        assert girder["section_mismatches"] == 1
        assert stats["totals"]["matched"] == 5
        assert stats["is_cross_version"] is True
        assert stats["issues"] == 1


class TestImportancePolicy:
    def test_lookup_order(self):
        policy = ImportancePolicy(
            levels={"Column/rotate": ImportanceLevel.REQUIRED, "Column": ImportanceLevel.UNNECESSARY},
            default_level=ImportanceLevel.NOT_APPLICABLE,
        )
        assert policy.level_for("StbColumn", "rotate") == ImportanceLevel.REQUIRED
        assert policy.level_for("Column", "name") == ImportanceLevel.UNNECESSARY
        assert policy.level_for("Girder", "name") == ImportanceLevel.NOT_APPLICABLE

    def test_json_values(self):
        policy = ImportancePolicy.model_validate_json('{"levels": {"Slab": "notApplicable"}}')
        assert policy.level_for("Slab") == ImportanceLevel.NOT_APPLICABLE
