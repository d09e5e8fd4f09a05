from sqlalchemy import Column, Integer, String, ForeignKey
from ..models import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    box_id = Column(Integer, ForeignKey("boxes.id", ondelete="SET NULL"), nullable=True, index=True)

    def __repr__(self):
        return f"<Item(id={self.id}, name={self.name}, box_id={self.box_id})>"
