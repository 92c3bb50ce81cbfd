from sqlalchemy import Column, Integer, LargeBinary

from .database import Base


class RegionEntry(Base):
    __tablename__ = "region_entries"

    region_id = Column(Integer, primary_key=True)
    key = Column(LargeBinary, primary_key=True)
    value = Column(LargeBinary, nullable=False)
