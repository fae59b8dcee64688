"""Shared fixtures: an in-memory SQLite database seeded with a small MRP dataset."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core.database import Base, get_db
from apps.bom.models import BomLine
from apps.inventory.models import InventoryLot, InventoryTag, StockLocation, Department
from apps.part_types.models import PartType, Attribute, PartTypeAttribute, Package
from apps.parts.models import Part, PartAttributeValue
from apps.uom.models import UnitOfMeasure

# Attribute ids used across the tests
SUBTYPE = 1
PACKAGE = 2
RESISTANCE = 3
LEAD_SPACING = 4
NOTES = 5
PIN_COUNT = 6

RESISTOR_TYPE = 1
CAPACITOR_TYPE = 2
ASSEMBLY_TYPE = 3


def seed(session):
    session.add_all([
        PartType(id=RESISTOR_TYPE, code="RES", name="Resistors", package_column="resistor"),
        PartType(id=CAPACITOR_TYPE, code="CAP", name="Capacitors", package_column="capacitor"),
        PartType(id=ASSEMBLY_TYPE, code="ASM", name="Assemblies", package_column=None),
    ])
    session.add_all([
        Attribute(id=SUBTYPE, code="Subtype", datatype="enum('SMD','THT')", required_rule="yes"),
        Attribute(
            id=PACKAGE, code="Package", datatype="enum('0402','0603','0805')",
            required_rule="required if subtype in 'SMD','SMT'",
        ),
        Attribute(id=RESISTANCE, code="Resistance", datatype="double", min_value=0, unit="ohm", required_rule="yes"),
        Attribute(
            id=LEAD_SPACING, code="LeadSpacing_2", datatype="double", unit="mm",
            required_rule="required if subtype in 'THT'",
        ),
        Attribute(id=NOTES, code="Notes", datatype="varchar(255)", required_rule=None),
        Attribute(id=PIN_COUNT, code="PinCount", datatype="int", min_value=1, max_value=64, required_rule="no"),
    ])
    session.flush()
    session.add_all([
        PartTypeAttribute(part_type_id=RESISTOR_TYPE, attribute_id=SUBTYPE, sort_order=1),
        PartTypeAttribute(part_type_id=RESISTOR_TYPE, attribute_id=PACKAGE, sort_order=2),
        PartTypeAttribute(part_type_id=RESISTOR_TYPE, attribute_id=RESISTANCE, sort_order=3),
        PartTypeAttribute(part_type_id=RESISTOR_TYPE, attribute_id=LEAD_SPACING, sort_order=4),
        PartTypeAttribute(part_type_id=RESISTOR_TYPE, attribute_id=NOTES, sort_order=5),
        PartTypeAttribute(part_type_id=RESISTOR_TYPE, attribute_id=PIN_COUNT, sort_order=6),
        PartTypeAttribute(part_type_id=CAPACITOR_TYPE, attribute_id=NOTES, sort_order=1),
    ])
    session.add_all([
        Package(code="0402", description="0402 chip", resistor=True),
        Package(code="0603", description="0603 chip", resistor=True, capacitor=True),
        Package(code="SOT-23", description="Small outline transistor", transistor=True),
        Package(code="TO-220", description="Power package", transistor=True),
    ])
    session.add_all([
        Part(part_number="AB100", description="Resistor 10k 0603", revision="A", stock_uom="EA",
             purchase_uom="BX", status="A", part_type_id=RESISTOR_TYPE,
             storage_room="STORE", location_code="A1"),
        Part(part_number="AB-200", description="Capacitor 100nF", revision="B", stock_uom="EA",
             status="A", part_type_id=CAPACITOR_TYPE, storage_room="STORE", location_code="B2"),
        Part(part_number="CD_300", description="Widget 50% off", revision="", stock_uom="EA",
             status="O", part_type_id=None, location_code="ZZ"),
        Part(part_number="ASSY-1", description="Main board assembly", stock_uom="EA",
             status="A", part_type_id=ASSEMBLY_TYPE),
        Part(part_number="XY 400", description="Spacer", status="A", part_type_id=ASSEMBLY_TYPE),
    ])
    session.flush()
    session.add_all([
        PartAttributeValue(part_number="AB100", attribute_id=SUBTYPE, value="SMD"),
        PartAttributeValue(part_number="AB100", attribute_id=PACKAGE, value="0603"),
        PartAttributeValue(part_number="AB100", attribute_id=RESISTANCE, value="10000"),
    ])
    session.add_all([
        Department(code="STORE", description="Main stores"),
        StockLocation(room_code="STORE", location_code="A1", description="Shelf A1"),
        StockLocation(room_code="STORE", location_code="B2", description="   "),
        StockLocation(room_code="", location_code="C3", description="Orphan"),
    ])
    session.add_all([
        InventoryLot(part_number="AB100", quantity=10, date_received=datetime(2024, 1, 5)),
        InventoryLot(part_number="AB100", quantity=5, date_received=datetime(2024, 3, 1)),
        InventoryLot(part_number="AB-200", quantity=3, date_received=datetime(2023, 11, 20)),
        InventoryLot(part_number="CD_300", quantity=2, date_received=None),
        InventoryTag(part_number="AB100", allocated_quantity=4),
        InventoryTag(part_number="AB100", allocated_quantity=None),
        # over-allocated
        InventoryTag(part_number="AB-200", allocated_quantity=5),
    ])
    session.add_all([
        BomLine(assembly="ASSY-1", component="AB100", item_sequence="2", quantity_per=2,
                uom_code="EA", effective_date=datetime(2024, 1, 1), notes=" fit first "),
        BomLine(assembly="ASSY-1", component="AB-200", item_sequence="10", quantity_per=1, uom_code="EA"),
        BomLine(assembly="ASSY-1", component="CD_300", item_sequence="abc", quantity_per=1),
        BomLine(assembly="ASSY-1", component="XY 400", item_sequence="1", quantity_per=4),
        BomLine(assembly="ASSY-0", component="AB100", item_sequence="1", quantity_per=1),
        BomLine(assembly="ASSY-2", component="ZZ9", item_sequence="5", quantity_per=1),
        BomLine(assembly="ASSY-2", component="AA1", item_sequence="5", quantity_per=1),
    ])
    session.add_all([
        UnitOfMeasure(code="EA", description="Each", uom_type=0, conversion_factor=1),
        UnitOfMeasure(code="BX", description="Box of 100", uom_type=1, conversion_factor=100),
        UnitOfMeasure(code="FT", description="Feet", uom_type=7, conversion_factor=None),
        UnitOfMeasure(code="KG", description="Kilogram", uom_type=None, conversion_factor=1),
    ])
    session.commit()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    SeedSession = sessionmaker(bind=engine)
    with SeedSession() as session:
        seed(session)

    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
