from sqlalchemy import Column, Integer, String, Index
from roybot.db.base import Base, Timestamp, utcnow

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    # Looked up by email, uniqueness is checked at signup rather than by the schema
    email = Column(String(320), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(Timestamp, default=utcnow, nullable=False)

    __table_args__ = (
        Index('idx_user_email', 'email'),
    )
