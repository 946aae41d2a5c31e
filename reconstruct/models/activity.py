"""Mind tools activity counter: one count per user, tracker and day."""
from sqlalchemy import Column, Date, Integer, String, UniqueConstraint

from reconstruct.db.session import Base
from reconstruct.models.mixins import IdMixin, OwnedMixin, TimestampMixin


class MindToolsActivity(IdMixin, OwnedMixin, TimestampMixin, Base):
    __tablename__ = "mind_tools_activity"
    __table_args__ = (
        UniqueConstraint("email", "tracker_type", "activity_date", name="uq_mind_tools_activity_natural_key"),
    )

    tracker_type = Column(String(50), nullable=False)
    activity_date = Column(Date, nullable=False)
    count = Column(Integer, nullable=False, default=1)
