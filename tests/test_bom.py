"""Tests for the bill of materials resolver."""

import pytest

from apps.bom.schemas import BomLineResult
from apps.bom.services import (
    BomService,
    assemblies_available,
    component_shortages,
    sequence_position,
)
from core.exceptions import InvalidInputError, NotFoundError


def line(component, quantity_per, available, **kwargs):
    return BomLineResult(
        assembly="ASSY",
        component=component,
        quantity_per=quantity_per,
        available_quantity=available,
        **kwargs,
    )


class TestBillOfMaterials:
    def test_numeric_sequence_order(self, db):
        lines = BomService(db).bill_of_materials("ASSY-1")

        assert [l.component for l in lines] == ["XY 400", "AB100", "AB-200", "CD_300"]
        assert [l.sequence for l in lines] == ["1", "2", "10", "abc"]
        assert [l.position for l in lines] == [1, 2, 10, None]

    def test_ties_broken_by_component(self, db):
        lines = BomService(db).bill_of_materials("ASSY-2")

        assert [l.component for l in lines] == ["AA1", "ZZ9"]

    def test_assembly_is_trimmed(self, db):
        assert len(BomService(db).bill_of_materials("  ASSY-1 ")) == 4

    def test_all_assemblies_ordered_by_assembly_first(self, db):
        lines = BomService(db).bill_of_materials()

        assert [l.assembly for l in lines] == ["ASSY-0"] + ["ASSY-1"] * 4 + ["ASSY-2"] * 2

    def test_limit(self, db):
        assert len(BomService(db).bill_of_materials(limit=2)) == 2

    def test_limit_is_capped(self, db):
        assert len(BomService(db).bill_of_materials(limit=10_000)) == 7

    def test_unknown_assembly_is_empty(self, db):
        assert BomService(db).bill_of_materials("NOPE") == []

    def test_line_fields(self, db):
        first_ab100 = [l for l in BomService(db).bill_of_materials("ASSY-1") if l.component == "AB100"][0]

        assert first_ab100.assembly_description == "Main board assembly"
        assert first_ab100.component_description == "Resistor 10k 0603"
        assert first_ab100.quantity_per == 2
        assert first_ab100.effective_date == "2024-01-01T00:00:00"
        assert first_ab100.obsolete_date is None
        assert first_ab100.notes == "fit first"
        assert first_ab100.component_location == "Shelf A1"
        assert first_ab100.available_quantity == 11

    def test_component_without_part_record(self, db):
        lines = BomService(db).bill_of_materials("ASSY-2")

        assert lines[0].component_description == ""
        assert lines[0].component_location == ""
        assert lines[0].available_quantity == 0


class TestSequencePosition:
    def test_numeric(self):
        assert sequence_position(" 010 ") == 10

    def test_non_numeric(self):
        assert sequence_position("1a") is None
        assert sequence_position("") is None
        assert sequence_position(None) is None


class TestAssembliesAvailable:
    def test_limited_by_scarcest_component(self):
        lines = [line("A", 2, 10), line("B", 1, 0), line("C", 0.5, 3)]

        assert assemblies_available(lines) == 0

    def test_rounds_down(self):
        assert assemblies_available([line("A", 2, 11), line("B", 3, 100)]) == 5

    def test_empty_bom_builds_nothing(self):
        assert assemblies_available([]) == 0

    @pytest.mark.parametrize("quantity_per", [0, -1, None])
    def test_non_positive_quantity_per_blocks_the_build(self, quantity_per):
        assert assemblies_available([line("A", 1, 10), line("B", quantity_per, 10)]) == 0


class TestComponentShortages:
    def test_shortfall(self):
        shortages = component_shortages([line("A", 2, 5), line("B", 1, 10)], quantity=4)

        assert [(s.component, s.required_quantity, s.shortage) for s in shortages] == [
            ("A", 8, 3),
            ("B", 4, 0),
        ]

    def test_non_consuming_lines_skipped(self):
        assert component_shortages([line("A", 0, 5)], quantity=3) == []

    def test_negative_quantity_rejected(self):
        with pytest.raises(InvalidInputError):
            component_shortages([line("A", 1, 1)], quantity=-1)


class TestBuildPlan:
    def test_plan(self, db):
        plan = BomService(db).build_plan("ASSY-0", quantity=20)

        assert plan.assemblies_available == 11
        assert len(plan.lines) == 1
        shortage = plan.shortages[0]
        assert shortage.component == "AB100"
        assert shortage.required_quantity == 20
        assert shortage.available_quantity == 11
        assert shortage.shortage == 9

    def test_blocked_by_missing_stock(self, db):
        plan = BomService(db).build_plan("ASSY-1")

        assert plan.assemblies_available == 0

    def test_unknown_assembly(self, db):
        with pytest.raises(NotFoundError):
            BomService(db).build_plan("NOPE")

    def test_blank_assembly(self, db):
        with pytest.raises(InvalidInputError):
            BomService(db).build_plan("  ")
