from sqlalchemy import Column, Integer, String, ForeignKey, Index
from roybot.db.base import Base, Timestamp, utcnow

class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(200), nullable=True)
    created_at = Column(Timestamp, default=utcnow, nullable=False)

    __table_args__ = (
        Index('idx_conversation_user_created', 'user_id', 'created_at'),
    )
