from sqlalchemy import Column, Integer, Text
from roybot.db.base import ChatLogBase, Timestamp, utcnow

class ChatMessage(ChatLogBase):
    """Raw chat message. Deliberately unlinked from users and conversations."""
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message = Column(Text, nullable=False)
    created_at = Column(Timestamp, default=utcnow, nullable=False)
