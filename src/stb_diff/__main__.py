"""stb-diff CLI.

Usage:
    python -m stb_diff <command> MODEL_A MODEL_B [options]

Inputs are JSON snapshots of parsed models (``ModelDocument``) or sections
(``SectionData``). Every command prints one JSON object with an ``ok`` flag.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import BaseModel, ValidationError

from stb_diff.comparison import (
    compare_models,
    generate_comparison_statistics,
    generate_version_difference_summary,
)
from stb_diff.config import ComparisonConfig, ImportancePolicy
from stb_diff.models import KeyType, ModelComparison, ModelDocument, SectionData
from stb_diff.sections import evaluate_section_equivalence

app = typer.Typer(
    name="stb_diff",
    help="stb-diff: version-aware comparison of ST-Bridge structural models.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _output(data: dict) -> None:
    """Print JSON output to stdout."""
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _fail(message: str) -> None:
    _output({"ok": False, "error": message})
    raise typer.Exit(1)


def _load(model_cls: type[BaseModel], path: Path):
    """Load a pydantic model from a JSON file, failing with a JSON error."""
    if not path.exists():
        _fail(f"File not found: {path}")
    try:
        return model_cls.model_validate_json(path.read_text())
    except ValidationError as e:
        _fail(f"Invalid {model_cls.__name__} in {path}: {e.error_count()} error(s): {e.errors()[0]['msg']}")


def _comparison_json(comparison: ModelComparison) -> dict:
    element_types = {}
    for element_type, tc in comparison.by_type.items():
        pairs = []
        for p in tc.pairs:
            entry = {
                "key": p.pair.key,
                "type_a": p.pair.type_a,
                "type_b": p.pair.type_b,
                "type_mismatch": p.pair.type_mismatch,
                **p.comparison.to_dict(),
            }
            if p.section is not None:
                entry["section"] = p.section.to_dict()
            pairs.append(entry)
        element_types[element_type] = {
            "matched": pairs,
            "only_a": [e.identity() or e.guid for e in tc.result.only_a],
            "only_b": [e.identity() or e.guid for e in tc.result.only_b],
        }
    return element_types


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr"),
):
    """Compare structural models across ST-Bridge 2.0.2 / 2.1.0."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def compare(
    model_a: Path = typer.Argument(..., help="Model A snapshot (JSON)"),
    model_b: Path = typer.Argument(..., help="Model B snapshot (JSON)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="ComparisonConfig JSON"),
    key: Optional[KeyType] = typer.Option(None, "--key", "-k", help="Pairing key: id, guid or position"),
):
    """Full comparison: matches, classified differences, sections, summary."""
    doc_a = _load(ModelDocument, model_a)
    doc_b = _load(ModelDocument, model_b)
    config = _load(ComparisonConfig, config_path) if config_path else ComparisonConfig()
    if key is not None:
        config = config.model_copy(update={"key_type": key})

    comparison = compare_models(doc_a, doc_b, config=config)
    _output({
        "ok": True,
        "version_a": comparison.version_a,
        "version_b": comparison.version_b,
        "summary": generate_version_difference_summary(comparison),
        "statistics": generate_comparison_statistics(comparison),
        "element_types": _comparison_json(comparison),
        "issues": [i.to_dict() for i in comparison.issues],
    })


@app.command()
def summary(
    model_a: Path = typer.Argument(..., help="Model A snapshot (JSON)"),
    model_b: Path = typer.Argument(..., help="Model B snapshot (JSON)"),
    importance_path: Optional[Path] = typer.Option(
        None, "--importance", "-i", help="ImportancePolicy JSON (S2/S4)"
    ),
):
    """Difference counts only, optionally weighted by an importance policy."""
    doc_a = _load(ModelDocument, model_a)
    doc_b = _load(ModelDocument, model_b)
    policy = _load(ImportancePolicy, importance_path) if importance_path else None

    comparison = compare_models(doc_a, doc_b)
    _output({
        "ok": True,
        "version_a": comparison.version_a,
        "version_b": comparison.version_b,
        "summary": generate_version_difference_summary(comparison, importance=policy),
        "issues": len(comparison.issues),
    })


@app.command()
def section(
    section_a: Path = typer.Argument(..., help="Section A (JSON)"),
    section_b: Path = typer.Argument(..., help="Section B (JSON)"),
    element_type: str = typer.Option("Column", "--element-type", "-t", help="Element type"),
):
    """Section equivalence of two section descriptions."""
    data_a = _load(SectionData, section_a)
    data_b = _load(SectionData, section_b)
    result = evaluate_section_equivalence(data_a, data_b, element_type)
    _output({"ok": True, "element_type": element_type, **result.to_dict()})


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
