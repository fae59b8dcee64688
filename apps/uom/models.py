from core.database import Base
from sqlalchemy import Column, Integer, String, Float


class UnitOfMeasure(Base):
    __tablename__ = "uomcodes"

    code = Column("UOMCode", String(10), primary_key=True)
    description = Column("DescText", String(255), nullable=True)
    # 0 stock, 1 purchase, 2 sales, 3 manufacturing
    uom_type = Column("UOMType", Integer, nullable=True)
    conversion_factor = Column("ConversionFactor", Float, nullable=True)
