"""ORM Models — SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from mathtutor.models.ai_usage_log import AiUsageLog  # noqa: F401
from mathtutor.models.curriculum_document import CurriculumDocument  # noqa: F401
