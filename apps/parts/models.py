from core.database import Base
from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship


class Part(Base):
    __tablename__ = "partmaster"

    part_number = Column("PartNumber", String(50), primary_key=True)
    description = Column("DescText", String(255), nullable=True)
    revision = Column("Revision", String(20), nullable=True)
    stock_uom = Column("StockUOM", String(10), nullable=True)
    purchase_uom = Column("UOMPurchase", String(10), nullable=True)
    status = Column("ISC", String(10), nullable=True)  # Item status code
    part_type_id = Column("PartTypeID", Integer, ForeignKey("parttypes.PartTypeID"), nullable=True)
    storage_room = Column("DepartmentCode", String(20), nullable=True)
    location_code = Column("LocationCode", String(20), nullable=True)

    part_type = relationship("PartType")
    attribute_values = relationship(
        "PartAttributeValue",
        back_populates="part",
        cascade="all, delete-orphan",
    )


class PartAttributeValue(Base):
    __tablename__ = "partattributes"

    part_number = Column("PartNumber", String(50), ForeignKey("partmaster.PartNumber"), primary_key=True)
    attribute_id = Column("AttributeID", Integer, ForeignKey("attributes.AttributeID"), primary_key=True)
    value = Column("Value", Text, nullable=True)

    part = relationship("Part", back_populates="attribute_values")
