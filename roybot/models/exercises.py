from sqlalchemy import Column, Integer, String, Float, ForeignKey, Index
from roybot.db.base import Base, Timestamp, utcnow

class Exercise(Base):
    __tablename__ = "exercises"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    exercise_type = Column(String(100), nullable=False)
    duration = Column(Float, nullable=True)
    intensity = Column(String(50), nullable=True)
    created_at = Column(Timestamp, default=utcnow, nullable=False)

    __table_args__ = (
        Index('idx_exercise_user_created', 'user_id', 'created_at'),
    )
