"""
Declarative base shared by every ORM model.

Models annotate plain ``Column`` attributes for editor support, so the
base allows annotations that are not ``Mapped[...]``.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    __allow_unmapped__ = True
