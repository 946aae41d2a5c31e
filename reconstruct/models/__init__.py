from reconstruct.models.activity import MindToolsActivity
from reconstruct.models.calendar import CalendarTask
from reconstruct.models.card_tasks import AnnualCalendarTasks, VisionBoardTasks, WeeklyPlannerTasks
from reconstruct.models.user import User

__all__ = [
    "User",
    "VisionBoardTasks",
    "WeeklyPlannerTasks",
    "AnnualCalendarTasks",
    "CalendarTask",
    "MindToolsActivity",
]
