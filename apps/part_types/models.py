import enum

from core.database import Base
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey
from sqlalchemy.orm import relationship


class PackageColumn(str, enum.Enum):
    """Component-category flags of the package catalog."""
    RESISTOR = "resistor"
    CAPACITOR = "capacitor"
    INDUCTOR = "inductor"
    DIODE = "diode"
    TRANSISTOR = "transistor"
    INTEGRATED_CIRCUIT = "integrated_circuit"
    CONNECTOR = "connector"


class PartType(Base):
    __tablename__ = "parttypes"

    id = Column("PartTypeID", Integer, primary_key=True, autoincrement=True)
    code = Column("PartTypeCode", String(50), unique=True, nullable=False)
    name = Column("SheetName", String(100), nullable=True)
    package_column = Column("PackageColumn", String(50), nullable=True)

    attribute_links = relationship(
        "PartTypeAttribute",
        back_populates="part_type",
        order_by="PartTypeAttribute.sort_order",
        cascade="all, delete-orphan",
    )


class Attribute(Base):
    __tablename__ = "attributes"

    id = Column("AttributeID", Integer, primary_key=True, autoincrement=True)
    code = Column("AttributeCode", String(100), nullable=False)
    # enum('a','b'), int, double or free text
    datatype = Column("DataType", String(255), nullable=True)
    min_value = Column("MinValue", Float, nullable=True)
    max_value = Column("MaxValue", Float, nullable=True)
    unit = Column("Unit", String(50), nullable=True)
    # yes, no, or text quoting the subtypes it applies to
    required_rule = Column("RequiredRule", String(255), nullable=True)


class PartTypeAttribute(Base):
    __tablename__ = "parttypeattributes"

    part_type_id = Column("PartTypeID", Integer, ForeignKey("parttypes.PartTypeID"), primary_key=True)
    attribute_id = Column("AttributeID", Integer, ForeignKey("attributes.AttributeID"), primary_key=True)
    sort_order = Column("SortOrder", Integer, nullable=False, default=0)

    part_type = relationship("PartType", back_populates="attribute_links")
    attribute = relationship("Attribute")


class Package(Base):
    __tablename__ = "packages"

    code = Column("PackageCode", String(50), primary_key=True)
    description = Column("DescText", String(255), nullable=True)
    resistor = Column("IsResistor", Boolean, nullable=False, default=False)
    capacitor = Column("IsCapacitor", Boolean, nullable=False, default=False)
    inductor = Column("IsInductor", Boolean, nullable=False, default=False)
    diode = Column("IsDiode", Boolean, nullable=False, default=False)
    transistor = Column("IsTransistor", Boolean, nullable=False, default=False)
    integrated_circuit = Column("IsIC", Boolean, nullable=False, default=False)
    connector = Column("IsConnector", Boolean, nullable=False, default=False)
