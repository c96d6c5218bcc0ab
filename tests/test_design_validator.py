"""Tests for the container containment validator."""

from __future__ import annotations

from psd_engine.domain.design_validator import validate_design
from psd_engine.domain.native import NativeDocument, NativeNode
from psd_engine.domain.template_extractor import extract_template_metadata
from tests.conftest import box


def _document(*design_children, group_name="BG"):
    return NativeDocument(width=200, height=100, children=[
        NativeNode(name=group_name, children=list(design_children)),
        NativeNode(name="!!TEMPLATE", children=[NativeNode(name="!!BG", **box(0, 0, 100, 200))]),
    ])


def _validate(document):
    return validate_design(document, extract_template_metadata(document))


class TestValidateDesign:
    def test_layer_above_container_top(self):
        report = _validate(_document(NativeNode(name="hat", **box(-5, 0, 50, 50))))

        assert report.is_valid is False
        assert len(report.issues) == 1
        issue = report.issues[0]
        assert issue.layer_name == "hat"
        assert issue.container_name == "BG"
        assert issue.type == "PROCEDURAL_VIOLATION"
        assert "top" in issue.message

    def test_inside_layers_are_valid(self):
        report = _validate(_document(
            NativeNode(name="inner", **box(10, 10, 90, 190)),
            NativeNode(name="touching", **box(0, 0, 100, 200)),
        ))
        assert report.is_valid is True
        assert report.issues == []

    def test_several_edges_give_one_issue(self):
        report = _validate(_document(NativeNode(name="huge", **box(-10, -10, 300, 300))))

        assert len(report.issues) == 1
        for edge in ("left", "top", "right", "bottom"):
            assert edge in report.issues[0].message

    def test_partial_bounds_are_skipped(self):
        report = _validate(_document(
            NativeNode(name="no box"),
            NativeNode(name="half", top=-50, left=-50),
        ))
        assert report.is_valid is True

    def test_unmatched_groups_are_ignored(self):
        report = _validate(_document(NativeNode(name="far", **box(500, 500, 600, 600)), group_name="Other"))
        assert report.is_valid is True

    def test_fixture_document(self, template_document):
        report = _validate(template_document)
        assert [(i.layer_name, i.container_name) for i in report.issues] == [("overflow", "BG")]

    def test_order_independent(self, template_document):
        template = extract_template_metadata(template_document)
        forward = validate_design(template_document, template)
        template_document.children.reverse()
        backward = validate_design(template_document, template)

        key = lambda i: (i.layer_name, i.container_name)
        assert sorted(map(key, forward.issues)) == sorted(map(key, backward.issues))

    def test_empty_document(self):
        report = _validate(NativeDocument(width=10, height=10))

        assert report.is_valid is False
        assert report.issues[0].layer_name == "Root"
        assert report.issues[0].container_name == "Global"

    def test_wire_format(self, template_document):
        dumped = _validate(template_document).model_dump(by_alias=True)
        assert dumped["isValid"] is False
        assert set(dumped["issues"][0]) == {"layerName", "containerName", "type", "message"}


def test_prefixed_design_group_matches_container():
    document = _document(NativeNode(name="hat", **box(-5, 0, 50, 50)), group_name="!!BG")
    report = _validate(document)
    assert [i.container_name for i in report.issues] == ["BG"]
