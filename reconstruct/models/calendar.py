"""CalendarTask model: one entry per user, theme and calendar day."""
from sqlalchemy import Column, Date, Integer, String, Text, UniqueConstraint

from reconstruct.db.session import Base
from reconstruct.models.mixins import IdMixin, OwnedMixin, TimestampMixin


class CalendarTask(IdMixin, OwnedMixin, TimestampMixin, Base):
    __tablename__ = "calendar_2025_tasks"
    __table_args__ = (
        UniqueConstraint("user_name", "email", "task_date", "theme", name="uq_calendar_2025_tasks_natural_key"),
    )

    task_date = Column(Date, nullable=False, index=True)
    task_type = Column(Integer, nullable=False)
    task_description = Column(Text, nullable=False)
    color_code = Column(String(32), nullable=False)  # selected-color-<task_type>
    theme = Column(String(50), nullable=False, index=True)
