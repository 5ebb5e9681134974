# backend/models/log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from database import Base

# Audit trail entry: one row per auth, order or favorites action
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Acting user; empty for failed logins/signups where nobody is known yet
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    action = Column(String(50), index=True)      # e.g. ORDER_CREATE, FAVORITE_ADD
    resource = Column(String(50), index=True)    # auth / orders / favorites
    status = Column(String(20), index=True)      # SUCCESS / FAIL
    ip = Column(String(64), nullable=True)

    meta = Column(JSON, nullable=True)
