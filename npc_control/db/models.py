"""SQLAlchemy database models for NPC Control."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CharacterRow(Base):
    """A campaign character. Archetype data lives in ``character_data``."""

    __tablename__ = "characters"

    id = Column(String(64), primary_key=True)
    session_id = Column(String(64), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    character_type = Column(String(10), nullable=False)  # PC, NPC, Enemy
    level = Column(Integer, default=1)
    hp_current = Column(Integer, default=100)
    hp_max = Column(Integer, default=100)
    character_data = Column(JSON, nullable=True)  # NPCData / EnemyData dump
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AIActionRow(Base):
    """One persisted AI decision.

    Timestamps are stored as ISO-8601 strings so timezone offsets
    survive backends (SQLite) that drop them from DateTime columns.
    """

    __tablename__ = "ai_actions"

    id = Column(String(36), primary_key=True)
    character_id = Column(String(64), nullable=False, index=True)
    session_id = Column(String(64), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    subtype = Column(String(64), nullable=True)

    details = Column(JSON, nullable=False)      # description, target, parameters
    context = Column(JSON, nullable=False)      # session/round/turn/mode/trigger
    ai_decision = Column(JSON, nullable=False)  # confidence, reasoning, alternatives
    feedback = Column(JSON, default=list)

    timestamp = Column(String(40), nullable=False, index=True)
    executed_at = Column(String(40), nullable=True)
    duration = Column(Float, nullable=True)
