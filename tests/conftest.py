"""Shared model fixtures: a 2.0.2 and a 2.1.0 revision of one small frame."""

import pytest

from stb_diff.models import ElementNode, ModelDocument, SectionData


def _el(tag, ident, **attrs):
    return ElementNode(tag=tag, id=ident, attributes={"id": ident, **attrs})


@pytest.fixture
def model_v202() -> ModelDocument:
    return ModelDocument(
        name="frame-v202",
        version="2.0.2",
        elements={
            "Column": [
                _el("StbColumn", "1", name="C1", id_section="10", rotate="0", condition_bottom="FIX"),
                _el("StbColumn", "2", name="C2", id_section="10", rotate="0"),
                _el("StbColumn", "3", name="C3", id_section="10", rotate="0"),
            ],
            "Post": [_el("StbPost", "4", name="P1", id_section="10")],
            "Girder": [
                _el("StbGirder", "100", name="G1", id_section="20", level="3000"),
                _el("StbGirder", "101", name="G2", id_section="20", level="3000"),
            ],
        },
        sections={
            "10": SectionData(id="10", section_type="RECTANGLE", material="FC24",
                              dimensions={"width_X": 600, "width_Y": 600}),
            "20": SectionData(id="20", section_type="H", material="SN490B",
                              dimensions={"A": 400, "B": 200, "t1": 8, "t2": 13}),
        },
    )


@pytest.fixture
def model_v210() -> ModelDocument:
    return ModelDocument(
        name="frame-v210",
        version="2.1.0",
        elements={
            "StbColumn": [
                _el("StbColumn", "1", name="C1", id_section="10", rotate="0.0"),
                _el("StbColumn", "2", name="C2", id_section="10", rotate="90"),
                _el("StbColumn", "4", name="P1", id_section="10", kind_column="POST"),
                _el("StbColumn", "5", name="C5", id_section="10", rotate="0"),
            ],
            "StbGirder": [_el("StbGirder", "100", name="G1", id_section="20", level="3000")],
            "StbBeam": [_el("StbBeam", "101", name="G2", id_section="21", level="3000")],
        },
        sections={
            "10": SectionData(id="10", type="RECTANGLE", strength_name="FC24",
                              dimensions={"width_X": "600.0", "width_Y": 600}),
            "20": SectionData(id="20", dimensions={"profile_hint": "H", "overall_depth": 400,
                                                   "overall_width": 200, "web_thickness": 8,
                                                   "flange_thickness": 13}, material="SN490C"),
            "21": SectionData(id="21", section_type="H", material="SN490B",
                              dimensions={"A": 450, "B": 200, "t1": 9, "t2": 14}),
        },
    )
