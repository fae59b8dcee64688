from core.database import Base
from sqlalchemy import Column, Integer, String, Float, DateTime


class InventoryLot(Base):
    __tablename__ = "inventorylots"

    id = Column("LotID", Integer, primary_key=True, autoincrement=True)
    part_number = Column("PartNumber", String(50), index=True, nullable=False)
    quantity = Column("Quantity", Float, nullable=False, default=0)
    date_received = Column("DateReceived", DateTime, nullable=True)


class InventoryTag(Base):
    __tablename__ = "inventorytags"

    id = Column("TagID", Integer, primary_key=True, autoincrement=True)
    part_number = Column("PartNumber", String(50), index=True, nullable=False)
    # Allocated quantity; NULL tags do not reserve stock
    allocated_quantity = Column("InventoryQuantity", Float, nullable=True)


class Department(Base):
    __tablename__ = "departmentcodes"

    code = Column("DepartmentCode", String(20), primary_key=True)
    description = Column("DescText", String(255), nullable=True)


class StockLocation(Base):
    __tablename__ = "stocklocations"

    id = Column("StockLocationID", Integer, primary_key=True, autoincrement=True)
    room_code = Column("DepartmentCode", String(20), index=True, nullable=True)
    location_code = Column("LocationCode", String(20), index=True, nullable=True)
    description = Column("DescText", String(255), nullable=True)
