from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .location import Location
from .box import Box
from .item import Item
