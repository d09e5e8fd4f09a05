from sqlalchemy import Column, Integer, String, Text, ForeignKey
from ..models import Base


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(Integer, ForeignKey("locations.id", ondelete="RESTRICT"), nullable=True, index=True)
    description = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Location(id={self.id}, name={self.name}, parent_id={self.parent_id})>"
