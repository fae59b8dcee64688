"""Tests for part detail and the transactional part upsert."""

import pytest

from apps.parts.models import Part, PartAttributeValue
from apps.parts.schemas import AttributeInput, PartUpsert
from apps.parts.services import PartService
from core.exceptions import InvalidInputError, NotFoundError, ValidationError
from conftest import (
    ASSEMBLY_TYPE,
    CAPACITOR_TYPE,
    LEAD_SPACING,
    NOTES,
    PACKAGE,
    PIN_COUNT,
    RESISTANCE,
    RESISTOR_TYPE,
    SUBTYPE,
)


def attrs(**values):
    ids = {
        "subtype": SUBTYPE,
        "package": PACKAGE,
        "resistance": RESISTANCE,
        "lead_spacing": LEAD_SPACING,
        "notes": NOTES,
        "pin_count": PIN_COUNT,
    }
    return [AttributeInput(attribute_id=ids[name], value=value) for name, value in values.items()]


def stored(session_factory, part_number):
    """Attribute rows as committed, read through a fresh session."""
    with session_factory() as session:
        rows = session.query(PartAttributeValue).filter(PartAttributeValue.part_number == part_number).all()
        return {row.attribute_id: row.value for row in rows}


class TestPartDetail:
    def test_fields(self, db):
        detail = PartService(db).get_detail("AB100")

        assert detail.part_type_id == RESISTOR_TYPE
        assert detail.part_type_code == "RES"
        assert detail.part_type_name == "Resistors"
        assert detail.storage_room == "STORE"
        assert detail.storage_location == "A1"
        assert detail.location == "Shelf A1"
        assert detail.available_quantity == 11

    def test_attributes_in_display_order_with_state(self, db):
        attributes = PartService(db).get_detail("AB100").attributes

        assert [a.code for a in attributes] == [
            "Subtype", "Package", "Resistance", "LeadSpacing_2", "Notes", "PinCount",
        ]
        by_code = {a.code: a for a in attributes}
        assert by_code["Subtype"].value == "SMD"
        assert by_code["Subtype"].is_subtype is True
        assert by_code["Package"].required is True
        assert by_code["Package"].options == ["0402", "0603", "0805"]
        assert by_code["LeadSpacing_2"].label == "LeadSpacing"
        assert by_code["LeadSpacing_2"].visible is False
        assert by_code["Notes"].value == ""

    def test_part_without_type(self, db):
        detail = PartService(db).get_detail("CD_300")

        assert detail.part_type_id is None
        assert detail.attributes == []

    def test_missing_part(self, db):
        assert PartService(db).get_detail("NOPE") is None


class TestUpsertPreconditions:
    def test_part_number_required(self, db):
        with pytest.raises(InvalidInputError, match="part number is required"):
            PartService(db).upsert(PartUpsert(part_number="  ", part_type_id=CAPACITOR_TYPE))

    def test_update_of_unknown_part_writes_nothing(self, db, session_factory):
        with pytest.raises(NotFoundError):
            PartService(db).upsert(PartUpsert(part_number="NEW-1", part_type_id=CAPACITOR_TYPE))

        with session_factory() as session:
            assert session.get(Part, "NEW-1") is None

    def test_create_requires_part_type(self, db):
        with pytest.raises(InvalidInputError) as exc_info:
            PartService(db).upsert(PartUpsert(part_number="NEW-1"), allow_create=True)
        assert exc_info.value.message == "A part type is required to create a part."

    def test_edit_of_untyped_part_requires_part_type(self, db):
        with pytest.raises(InvalidInputError) as exc_info:
            PartService(db).upsert(PartUpsert(part_number="CD_300", description="x"))
        assert exc_info.value.message == "Part CD_300 has no part type. Select one before saving."

    def test_unknown_part_type(self, db):
        with pytest.raises(InvalidInputError, match="not defined"):
            PartService(db).upsert(PartUpsert(part_number="AB100", part_type_id=99))


class TestUpsertAttributes:
    def test_round_trip(self, db, session_factory):
        payload = PartUpsert(
            part_number="AB100",
            attributes=attrs(subtype="SMD", package="0402", resistance="4.7", notes="tight tolerance"),
        )
        detail = PartService(db).upsert(payload)

        values = {a.attribute_id: a.value for a in detail.attributes}
        assert values[PACKAGE] == "0402"
        assert values[RESISTANCE] == "4.7"
        assert stored(session_factory, "AB100") == {
            SUBTYPE: "SMD",
            PACKAGE: "0402",
            RESISTANCE: "4.7",
            NOTES: "tight tolerance",
        }

    def test_resubmitting_is_idempotent(self, db, session_factory):
        payload = PartUpsert(
            part_number="AB100",
            description="Resistor 4k7 0402",
            attributes=attrs(subtype="SMD", package="0402", resistance="4700"),
        )
        service = PartService(db)

        first = service.upsert(payload)
        second = service.upsert(payload)

        assert first == second
        assert len(stored(session_factory, "AB100")) == 3

    def test_subtype_change_drops_attributes_not_resubmitted(self, db, session_factory):
        payload = PartUpsert(
            part_number="AB100",
            attributes=attrs(subtype="THT", resistance="10000", lead_spacing="5.08"),
        )
        detail = PartService(db).upsert(payload)

        assert PACKAGE not in stored(session_factory, "AB100")
        by_code = {a.code: a for a in detail.attributes}
        assert by_code["Package"].visible is False
        assert by_code["LeadSpacing_2"].required is True

    def test_missing_required_attributes_listed_together(self, db, session_factory):
        payload = PartUpsert(part_number="AB100", attributes=attrs(subtype="THT"))

        with pytest.raises(ValidationError) as exc_info:
            PartService(db).upsert(payload)

        assert exc_info.value.message == "Missing required attributes: Resistance, LeadSpacing_2."
        assert stored(session_factory, "AB100")[SUBTYPE] == "SMD"

    def test_invalid_value_leaves_stored_set_untouched(self, db, session_factory):
        before = stored(session_factory, "AB100")
        payload = PartUpsert(
            part_number="AB100",
            description="changed",
            attributes=attrs(subtype="SMD", package="9999", resistance="1"),
        )

        with pytest.raises(ValidationError, match="Package must be one of"):
            PartService(db).upsert(payload)

        assert stored(session_factory, "AB100") == before
        with session_factory() as session:
            assert session.get(Part, "AB100").description == "Resistor 10k 0603"

    def test_values_are_normalized(self, db, session_factory):
        payload = PartUpsert(
            part_number="AB100",
            attributes=attrs(subtype="smd", package="0603", resistance="1", pin_count="+08"),
        )
        PartService(db).upsert(payload)

        values = stored(session_factory, "AB100")
        assert values[SUBTYPE] == "SMD"
        assert values[PIN_COUNT] == "8"

    def test_out_of_range(self, db):
        payload = PartUpsert(
            part_number="AB100",
            attributes=attrs(subtype="SMD", package="0603", resistance="1", pin_count="0"),
        )
        with pytest.raises(ValidationError, match="PinCount must be at least 1"):
            PartService(db).upsert(payload)

    def test_attributes_outside_the_type_are_ignored(self, db, session_factory):
        payload = PartUpsert(
            part_number="ASSY-1",
            attributes=attrs(subtype="SMD", notes="not mapped"),
        )
        detail = PartService(db).upsert(payload)

        assert detail.attributes == []
        assert stored(session_factory, "ASSY-1") == {}

    def test_type_change_replaces_attribute_set(self, db, session_factory):
        payload = PartUpsert(
            part_number="AB100",
            part_type_id=CAPACITOR_TYPE,
            attributes=attrs(subtype="SMD", notes="now a capacitor"),
        )
        detail = PartService(db).upsert(payload)

        assert detail.part_type_id == CAPACITOR_TYPE
        assert stored(session_factory, "AB100") == {NOTES: "now a capacitor"}

    def test_omitted_attributes_keep_current_set(self, db, session_factory):
        before = stored(session_factory, "AB100")

        detail = PartService(db).upsert(PartUpsert(part_number="AB100", description="  New text "))

        assert detail.description == "New text"
        assert detail.revision == "A"
        assert stored(session_factory, "AB100") == before

    def test_omitted_attributes_revalidated_against_new_type(self, db, session_factory):
        PartService(db).upsert(PartUpsert(part_number="AB100", part_type_id=ASSEMBLY_TYPE))

        assert stored(session_factory, "AB100") == {}


class TestUpsertCreate:
    def test_create(self, db, session_factory):
        payload = PartUpsert(
            part_number=" NEW-1 ",
            description="Ceramic capacitor",
            stock_uom="EA",
            part_type_id=CAPACITOR_TYPE,
            storage_location="A1",
            attributes=attrs(notes="X7R"),
        )
        detail = PartService(db).upsert(payload, allow_create=True)

        assert detail.part_number == "NEW-1"
        assert detail.location == "Shelf A1"
        assert detail.available_quantity == 0
        assert stored(session_factory, "NEW-1") == {NOTES: "X7R"}

    def test_create_enforces_required_attributes(self, db, session_factory):
        payload = PartUpsert(part_number="NEW-2", part_type_id=RESISTOR_TYPE, attributes=[])

        with pytest.raises(ValidationError, match="Missing required attributes: Subtype, Resistance."):
            PartService(db).upsert(payload, allow_create=True)

        with session_factory() as session:
            assert session.get(Part, "NEW-2") is None
