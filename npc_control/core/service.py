"""
AI Character Service: the operations the hosting application calls.

    start_control / stop_control / emergency_stop   – session lifecycle
    trigger_action / execute_action                 – decisions
    record_feedback                                 – learning
    get_session_status / update_character_settings  – monitoring and tuning

All state lives in the injected SessionRegistry; persistence goes
through the character and action stores.
"""

import logging
import random
from typing import Any, Iterable, Optional

from ..agents.action_content import ActionContentGenerator
from ..behavior import ActionSelector, BehaviorPatternCatalog, EligibilityEvaluator
from ..characters import initial_autonomy, is_ai_controllable, parse_character
from ..db.stores import ActionStore, CharacterStore, SqlActionStore, SqlCharacterStore
from ..enums import AutonomyLevel
from .actions import AIAction
from .context import build_decision_context
from .controllers import (
    CharacterController,
    ControllerSettings,
    SessionController,
    SessionControllerSummary,
    SessionSettings,
    SessionStatus,
)
from .engine import ActionNotifier, DecisionEngine
from .learning import FeedbackLearner
from .registry import SessionRegistry

logger = logging.getLogger(__name__)

DEFAULT_RECENT_ACTIONS = 20


class AICharacterService:
    """Facade over the registry, the decision engine and the feedback learner.

    Example:
        service = AICharacterService(rng=random.Random(42))
        await service.start_control("session-1", characters)
        action = await service.trigger_action("npc-1", "session-1", {"triggers": ["greeting"]})
    """

    def __init__(
        self,
        catalog: Optional[BehaviorPatternCatalog] = None,
        registry: Optional[SessionRegistry] = None,
        character_store: Optional[CharacterStore] = None,
        action_store: Optional[ActionStore] = None,
        generator: Optional[ActionContentGenerator] = None,
        rng: Optional[random.Random] = None,
        notifier: Optional[ActionNotifier] = None,
    ):
        self.catalog = catalog if catalog is not None else BehaviorPatternCatalog.load_default()
        self.registry = registry if registry is not None else SessionRegistry()
        self.character_store = character_store if character_store is not None else SqlCharacterStore()
        self.action_store = action_store if action_store is not None else SqlActionStore()

        self.engine = DecisionEngine(
            catalog=self.catalog,
            registry=self.registry,
            character_store=self.character_store,
            action_store=self.action_store,
            generator=generator,
            selector=ActionSelector(rng),
            evaluator=EligibilityEvaluator(),
            notifier=notifier,
        )
        self.learner = FeedbackLearner(self.registry, self.action_store)

    # ==========================================
    # Session lifecycle
    # ==========================================

    async def start_control(
        self,
        session_id: str,
        characters: Iterable[Any],
        settings: SessionSettings | dict | None = None,
    ) -> SessionControllerSummary:
        """Start AI control for a session, replacing any previous control.

        Args:
            session_id: The session to control
            characters: Character models or raw mappings; PCs are skipped
            settings: Session automation settings (defaults when omitted)
        """
        if isinstance(settings, dict):
            settings = SessionSettings.model_validate(settings)

        session = SessionController(session_id=session_id, settings=settings or SessionSettings())
        for character in characters:
            if isinstance(character, dict):
                character = parse_character(character)
            if not is_ai_controllable(character):
                continue
            session.character_controllers[character.id] = self._create_controller(session_id, character)

        previous = await self.registry.register(session)
        if previous is not None:
            logger.info(f"Replaced previous AI control for session {session_id}")

        logger.info(f"AI control started for session {session_id}: {len(session.character_controllers)} characters")
        return session.summary()

    def _create_controller(self, session_id: str, character) -> CharacterController:
        autonomy = initial_autonomy(character)
        return CharacterController(
            character_id=character.id,
            character_type=character.archetype,
            session_id=session_id,
            settings=ControllerSettings(
                enabled=autonomy != AutonomyLevel.MANUAL,
                autonomy_level=autonomy,
            ),
            active_pattern_ids=self.catalog.ids_for(character.archetype),
        )

    async def stop_control(self, session_id: str) -> None:
        """Stop AI control; later decisions for the session quietly decline."""
        session = await self.registry.remove(session_id)
        if session is None:
            logger.debug(f"stop_control: session {session_id} was not controlled")
            return
        logger.info(f"AI control stopped for session {session_id}")

    async def emergency_stop(self, session_id: Optional[str] = None) -> list[str]:
        """Stop one session, or every session when no id is given.

        Returns:
            Ids of the sessions that were stopped
        """
        if session_id is not None:
            session = await self.registry.remove(session_id)
            stopped = [session.session_id] if session is not None else []
        else:
            stopped = [s.session_id for s in await self.registry.clear()]

        logger.warning(f"Emergency stop: {len(stopped)} session(s) halted")
        return stopped

    # ==========================================
    # Decisions
    # ==========================================

    async def trigger_action(
        self,
        character_id: str,
        session_id: str,
        partial_context: Optional[dict[str, Any]] = None,
    ) -> Optional[AIAction]:
        """Ask a controlled character to act now.

        Returns:
            The decided action, or None when the character is not under
            active AI control or nothing applies

        Raises:
            pydantic.ValidationError: If ``partial_context`` is malformed
            PersistenceError: If a store fails
        """
        controller = self.registry.get_controller_in_session(session_id, character_id)
        if controller is None or not controller.enabled:
            logger.debug(f"trigger_action: {character_id} is not under active control in {session_id}")
            return None

        character = self.character_store.get_character_by_id(character_id)
        default_hp = (character.current_hp, character.max_hp) if character else (100, 100)

        context = build_decision_context(
            session_id=session_id,
            character_id=character_id,
            character_type=controller.character_type,
            partial=partial_context,
            default_hp=default_hp,
        )
        return await self.engine.decide(context)

    async def execute_action(self, action_id: str) -> bool:
        """Mark an action executed and drop it from its controller's pending list.

        Returns:
            False if the action is unknown. Executing twice keeps the
            first execution time.
        """
        action = self.action_store.get_by_id(action_id)
        if action is None:
            logger.warning(f"execute_action: unknown action {action_id}")
            return False

        if action.is_executed:
            return True

        self.action_store.save(action.mark_executed())

        controller = self.registry.get_controller_in_session(action.session_id, action.character_id)
        if controller is not None:
            async with controller.lock:
                controller.remove_pending(action_id)

        session = self.registry.get_session(action.session_id)
        if session is not None:
            session.performance.record_execution()

        logger.info(f"Action {action_id} executed by {action.character_id}")
        return True

    async def record_feedback(self, action_id: str, rating: int, comment: Optional[str] = None) -> None:
        """Apply a player rating (1-5) to an action.

        Raises:
            InvalidFeedbackError: If the rating is out of range
        """
        await self.learner.record_feedback(action_id, rating, comment)

    # ==========================================
    # Monitoring and tuning
    # ==========================================

    def get_session_status(self, session_id: str, recent_limit: int = DEFAULT_RECENT_ACTIONS) -> SessionStatus:
        """Control state, recent actions and performance of a session."""
        recent_actions = self.action_store.list_for_session(session_id, limit=recent_limit)
        session = self.registry.get_session(session_id)
        if session is None:
            return SessionStatus(
                session_id=session_id,
                ai_control_active=False,
                recent_actions=recent_actions,
            )

        return SessionStatus(
            session_id=session_id,
            ai_control_active=True,
            controlled_characters=[c.summary() for c in session.character_controllers.values()],
            recent_actions=recent_actions,
            performance=session.performance.snapshot(),
        )

    def update_character_settings(self, character_id: str, **changes: Any) -> Optional[ControllerSettings]:
        """Change a live controller's settings.

        Setting ``autonomy_level`` to manual disables the controller, even
        when ``enabled`` is passed alongside it.

        Returns:
            The new settings, or None if the character is not controlled

        Raises:
            pydantic.ValidationError: If a value is out of range
        """
        controller = self.registry.get_character_controller(character_id)
        if controller is None:
            logger.warning(f"update_character_settings: {character_id} is not controlled")
            return None

        settings = controller.update_settings(**changes)
        logger.info(
            f"Settings for {character_id} updated: autonomy={settings.autonomy_level}, enabled={settings.enabled}"
        )
        return settings
