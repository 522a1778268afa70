"""CurriculumDocument ORM — the whole curriculum tree as one JSON document.

Invariants:
    - Row id 1 holds the live curriculum (levels[] at the top)
    - data is never partially updated here; editing is owned by the admin tooling
"""

from sqlalchemy import Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column

from mathtutor.db.base import Base

CURRICULUM_ROW_ID = 1


class CurriculumDocument(Base):
    """Curriculum document row."""
    __tablename__ = "curriculum"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    data: Mapped[list | None] = mapped_column(JSON, nullable=True)
