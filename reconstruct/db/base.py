"""SQLAlchemy declarative base and model imports for Alembic."""
from reconstruct.db.session import Base

# Import all models so Alembic can see them
from reconstruct.models.activity import MindToolsActivity  # noqa: F401
from reconstruct.models.calendar import CalendarTask  # noqa: F401
from reconstruct.models.card_tasks import (  # noqa: F401
    AnnualCalendarTasks,
    VisionBoardTasks,
    WeeklyPlannerTasks,
)
from reconstruct.models.user import User  # noqa: F401

__all__ = [
    "Base",
    "User",
    "VisionBoardTasks",
    "WeeklyPlannerTasks",
    "AnnualCalendarTasks",
    "CalendarTask",
    "MindToolsActivity",
]
