from sqlalchemy import Column, Integer, String, ForeignKey
from ..models import Base


class Box(Base):
    __tablename__ = "boxes"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False, index=True)

    def __repr__(self):
        return f"<Box(id={self.id}, name={self.name}, location_id={self.location_id})>"
