"""Character and action stores.

The engine talks to persistence through two small interfaces:

    CharacterStore  – get_character_by_id
    ActionStore     – save / get_by_id / list_for_session

The SQLAlchemy implementations below wrap every database error in
PersistenceError so callers see one failure type.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as SQLAlchemySession

from ..characters import (
    EnemyCharacter,
    NPCCharacter,
    default_enemy_data,
    default_npc_data,
    parse_character,
)
from ..core.actions import AIAction
from ..enums import CharacterType
from ..errors import PersistenceError
from .models import AIActionRow, CharacterRow
from .session import get_session_factory

logger = logging.getLogger(__name__)


class CharacterStore(ABC):
    @abstractmethod
    def get_character_by_id(self, character_id: str):
        """Return the Character, or None if unknown."""


class ActionStore(ABC):
    @abstractmethod
    def save(self, action: AIAction) -> None:
        """Insert or replace an action record."""

    @abstractmethod
    def get_by_id(self, action_id: str) -> Optional[AIAction]:
        """Return the action, or None if unknown."""

    @abstractmethod
    def list_for_session(self, session_id: str, limit: int = 20) -> list[AIAction]:
        """Most recent actions of a session, newest first."""


class _SqlStore:
    def __init__(self, session_factory: Optional[Callable[[], SQLAlchemySession]] = None):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Generator[SQLAlchemySession, None, None]:
        factory = self._session_factory or get_session_factory()
        session = factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"{type(self).__name__}.{operation} failed: {e}")
            raise PersistenceError(f"{operation} failed: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


class SqlCharacterStore(_SqlStore, CharacterStore):
    """Characters table access."""

    def get_character_by_id(self, character_id: str):
        with self._session("get_character_by_id") as db:
            row = db.get(CharacterRow, character_id)
            return self._row_to_character(row) if row else None

    def list_characters(self, session_id: Optional[str] = None) -> list:
        with self._session("list_characters") as db:
            query = db.query(CharacterRow)
            if session_id is not None:
                query = query.filter(CharacterRow.session_id == session_id)
            return [self._row_to_character(row) for row in query.order_by(CharacterRow.id).all()]

    def add_character(self, character) -> None:
        """Insert or replace a character."""
        if isinstance(character, NPCCharacter):
            character_data = character.npc_data.model_dump(mode="json")
        elif isinstance(character, EnemyCharacter):
            character_data = character.enemy_data.model_dump(mode="json")
        else:
            character_data = None

        with self._session("add_character") as db:
            db.merge(CharacterRow(
                id=character.id,
                session_id=character.session_id,
                name=character.name,
                description=character.description,
                character_type=str(character.character_type),
                level=character.level,
                hp_current=character.current_hp,
                hp_max=character.max_hp,
                character_data=character_data,
            ))

    @staticmethod
    def _row_to_character(row: CharacterRow):
        """Convert a row to its Character variant, filling archetype defaults."""
        data = {
            "id": row.id,
            "session_id": row.session_id,
            "name": row.name,
            "description": row.description or "",
            "character_type": row.character_type,
            "level": row.level or 1,
            "current_hp": row.hp_current if row.hp_current is not None else 100,
            "max_hp": row.hp_max if row.hp_max is not None else 100,
        }
        if row.character_type == CharacterType.NPC:
            data["npc_data"] = row.character_data or default_npc_data().model_dump()
        elif row.character_type == CharacterType.ENEMY:
            data["enemy_data"] = row.character_data or default_enemy_data().model_dump()

        try:
            return parse_character(data)
        except ValidationError as e:
            raise PersistenceError(f"Character {row.id} has invalid stored data: {e}") from e


class SqlActionStore(_SqlStore, ActionStore):
    """ai_actions table access."""

    def save(self, action: AIAction) -> None:
        with self._session("save") as db:
            db.merge(self._action_to_row(action))

    def get_by_id(self, action_id: str) -> Optional[AIAction]:
        with self._session("get_by_id") as db:
            row = db.get(AIActionRow, action_id)
            return self._row_to_action(row) if row else None

    def list_for_session(self, session_id: str, limit: int = 20) -> list[AIAction]:
        with self._session("list_for_session") as db:
            rows = (
                db.query(AIActionRow)
                .filter(AIActionRow.session_id == session_id)
                .order_by(AIActionRow.timestamp.desc())
                .limit(limit)
                .all()
            )
            return [self._row_to_action(row) for row in rows]

    @staticmethod
    def _action_to_row(action: AIAction) -> AIActionRow:
        data = action.model_dump(mode="json")
        return AIActionRow(
            id=action.id,
            character_id=action.character_id,
            session_id=action.session_id,
            type=data["type"],
            subtype=action.subtype,
            details=data["details"],
            context=data["context"],
            ai_decision=data["ai_decision"],
            feedback=data["feedback"],
            timestamp=action.timestamp.isoformat(timespec="microseconds"),
            executed_at=action.executed_at.isoformat(timespec="microseconds") if action.executed_at else None,
            duration=action.duration,
        )

    @staticmethod
    def _row_to_action(row: AIActionRow) -> AIAction:
        try:
            return AIAction.model_validate({
                "id": row.id,
                "character_id": row.character_id,
                "type": row.type,
                "subtype": row.subtype,
                "details": row.details,
                "context": row.context,
                "ai_decision": row.ai_decision,
                "feedback": row.feedback or [],
                "timestamp": datetime.fromisoformat(row.timestamp),
                "executed_at": datetime.fromisoformat(row.executed_at) if row.executed_at else None,
                "duration": row.duration,
            })
        except (ValidationError, ValueError) as e:
            raise PersistenceError(f"Action {row.id} has invalid stored data: {e}") from e
