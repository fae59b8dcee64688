from core.database import Base
from sqlalchemy import Column, Integer, String, Float, DateTime, Text


class BomLine(Base):
    __tablename__ = "bom"

    id = Column("BOMID", Integer, primary_key=True, autoincrement=True)
    assembly = Column("Assembly", String(50), index=True, nullable=False)
    component = Column("Component", String(50), index=True, nullable=False)
    # Usually numeric text ("10", "20"), but free text is allowed
    item_sequence = Column("ItemSequence", String(20), nullable=True)
    quantity_per = Column("QuantityPer", Float, nullable=True)
    uom_code = Column("BOMUOMCode", String(10), nullable=True)
    effective_date = Column("EffectiveDate", DateTime, nullable=True)
    obsolete_date = Column("ObsoleteDate", DateTime, nullable=True)
    notes = Column("Notes", Text, nullable=True)
