"""Task collections: one row holds the whole task list of a card within a theme."""
from sqlalchemy import JSON, Column, String, UniqueConstraint
from sqlalchemy.orm import declared_attr

from reconstruct.db.session import Base
from reconstruct.models.mixins import IdMixin, OwnedMixin, TimestampMixin


class CardTasksMixin(IdMixin, OwnedMixin, TimestampMixin):
    card_id = Column(String(255), nullable=False, index=True)
    # JSON array of {text, completed, id}; rewritten as a whole on save
    tasks = Column(JSON, nullable=False)
    theme = Column(String(255), nullable=False, index=True)

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint(
                "user_name", "email", "card_id", "theme",
                name=f"uq_{cls.__tablename__}_natural_key",
            ),
        )


class VisionBoardTasks(CardTasksMixin, Base):
    __tablename__ = "vision_board_tasks"


class WeeklyPlannerTasks(CardTasksMixin, Base):
    __tablename__ = "weekly_planner_tasks"


class AnnualCalendarTasks(CardTasksMixin, Base):
    __tablename__ = "annual_calendar_tasks"
