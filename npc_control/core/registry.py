"""Session registry: the live index of session and character controllers."""

import asyncio
import logging
from typing import Optional

from .controllers import CharacterController, SessionController

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns every SessionController of one hosting process.

    Reads are plain dict lookups. Writes (registering or removing a
    session) are serialized by a single lock; they only happen when AI
    control starts or stops.

    A character id can be indexed by one controller at a time. If two
    sessions control the same character, the most recently started one
    owns the index entry, and stopping the older session leaves it alone.
    """

    def __init__(self):
        self._sessions: dict[str, SessionController] = {}
        self._characters: dict[str, CharacterController] = {}
        self._write_lock = asyncio.Lock()

    async def register(self, session: SessionController) -> Optional[SessionController]:
        """Install a session controller, replacing any previous one for the id.

        Returns:
            The replaced controller, if any
        """
        async with self._write_lock:
            previous = self._sessions.pop(session.session_id, None)
            if previous is not None:
                self._unindex(previous)
            self._sessions[session.session_id] = session
            self._characters.update(session.character_controllers)
            return previous

    async def remove(self, session_id: str) -> Optional[SessionController]:
        """Drop a session and un-index its character controllers."""
        async with self._write_lock:
            session = self._sessions.pop(session_id, None)
            if session is not None:
                self._unindex(session)
            return session

    async def clear(self) -> list[SessionController]:
        async with self._write_lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._characters.clear()
            return sessions

    def _unindex(self, session: SessionController) -> None:
        for character_id, controller in session.character_controllers.items():
            if self._characters.get(character_id) is controller:
                del self._characters[character_id]

    def get_session(self, session_id: str) -> Optional[SessionController]:
        return self._sessions.get(session_id)

    def get_character_controller(self, character_id: str) -> Optional[CharacterController]:
        return self._characters.get(character_id)

    def get_controller_in_session(self, session_id: str, character_id: str) -> Optional[CharacterController]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        return session.character_controllers.get(character_id)

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
