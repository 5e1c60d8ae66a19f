"""Models loaded by name through ``softcascade relations``."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base, relationship

from softcascade.soft_delete import SoftDeleteMixin

Base = declarative_base()


class Shelf(Base, SoftDeleteMixin):
    __tablename__ = "shelves"

    id = Column(Integer, primary_key=True)

    books = relationship("Book", info={"soft_delete_cascade": True})
    labels = relationship("Label", info={"soft_delete_cascade": True})


class Book(Base, SoftDeleteMixin):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True)
    shelf_id = Column(Integer, ForeignKey("shelves.id"))
    title = Column(String(200))


class Label(Base):
    __tablename__ = "labels"

    id = Column(Integer, primary_key=True)
    shelf_id = Column(Integer, ForeignKey("shelves.id"))
