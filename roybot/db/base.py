from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import DeclarativeBase

# Microsecond precision so created_at ordering holds within one second on MySQL too
Timestamp = DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql")

def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

class Base(DeclarativeBase):
    pass

class ChatLogBase(DeclarativeBase):
    """Separate metadata for the chat log store, which may live in another database."""
