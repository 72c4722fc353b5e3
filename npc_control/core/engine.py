"""
Decision engine: one character, one decision.

Pipeline per call:
1. Look up the character's controller (absent or disabled: no decision)
2. Resolve its patterns and keep the eligible ones, highest priority first
3. Weighted-random selection of one action template
4. AI elaboration of the template (fallback on any generation failure)
5. Assemble, persist and queue the AIAction, then notify in the background
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from ..agents.action_content import ActionContent, ActionContentGenerator
from ..behavior import ActionCandidate, ActionSelector, BehaviorPatternCatalog, EligibilityEvaluator
from ..db.stores import ActionStore, CharacterStore
from ..errors import PersistenceError
from ..utils.tasks import safe_create_task
from .actions import ActionContextSnapshot, ActionDetails, AIAction, DecisionMetadata
from .context import DecisionContext
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class ActionNotifier(ABC):
    """Told about every completed decision (e.g. to broadcast it to clients)."""

    @abstractmethod
    async def action_decided(self, action: AIAction) -> None:
        pass


class DecisionEngine:
    """Orchestrates a single decision for one character.

    Decisions for the same character are sequenced by the controller's
    lock; different characters decide concurrently.
    """

    def __init__(
        self,
        catalog: BehaviorPatternCatalog,
        registry: SessionRegistry,
        character_store: CharacterStore,
        action_store: ActionStore,
        generator: Optional[ActionContentGenerator] = None,
        selector: Optional[ActionSelector] = None,
        evaluator: Optional[EligibilityEvaluator] = None,
        notifier: Optional[ActionNotifier] = None,
    ):
        self.catalog = catalog
        self.registry = registry
        self.character_store = character_store
        self.action_store = action_store
        self.generator = generator or ActionContentGenerator()
        self.selector = selector or ActionSelector()
        self.evaluator = evaluator or EligibilityEvaluator()
        self.notifier = notifier

    async def decide(self, context: DecisionContext) -> Optional[AIAction]:
        """Decide what the context's character does next.

        Returns:
            The persisted AIAction, or None when there is nothing to do
            (no controller, disabled, no eligible pattern, or an
            unexpected failure that was logged)

        Raises:
            PersistenceError: If a store read or write fails
        """
        controller = self.registry.get_controller_in_session(context.session_id, context.character_id)
        if controller is None or not controller.enabled:
            logger.debug(f"No active controller for {context.character_id} in {context.session_id}")
            return None

        async with controller.lock:
            # Settings may have changed while waiting for the lock
            if not controller.enabled:
                return None

            patterns = self.catalog.resolve(controller.active_pattern_ids)
            eligible = self.evaluator.filter(patterns, context)
            if not eligible:
                logger.debug(f"No eligible pattern for {context.character_id} in {context.mode}")
                return None

            started = time.perf_counter()
            try:
                candidate = self.selector.select(eligible, controller.learning.adaptive_weights)
                if candidate is None:
                    return None

                character = self.character_store.get_character_by_id(context.character_id)
                content = await self.generator.elaborate(character, context, candidate.template)
                action = self._assemble(context, candidate, content)
                self.action_store.save(action)
            except PersistenceError:
                raise
            except Exception:
                logger.exception(f"Decision for {context.character_id} failed")
                return None

            controller.add_pending(action)
            elapsed_ms = (time.perf_counter() - started) * 1000

        session = self.registry.get_session(context.session_id)
        if session is not None:
            session.performance.record_decision(elapsed_ms)

        logger.info(
            f"{context.character_id} decided {action.type} via '{candidate.pattern.id}' "
            f"({'fallback' if content.is_fallback else 'ai'}, {elapsed_ms:.0f}ms)"
        )
        self._notify(action)
        return action

    @staticmethod
    def _assemble(context: DecisionContext, candidate: ActionCandidate, content: ActionContent) -> AIAction:
        session_state = context.session_state
        return AIAction(
            character_id=context.character_id,
            type=candidate.template.type,
            subtype=candidate.pattern.id,
            details=ActionDetails(
                description=content.description,
                target=content.target,
                parameters=content.parameters,
            ),
            context=ActionContextSnapshot(
                session_id=context.session_id,
                round=session_state.round,
                turn=session_state.turn,
                session_mode=session_state.mode,
                current_event=session_state.active_event,
                trigger_reason=f"Pattern: {candidate.pattern.name}",
            ),
            ai_decision=DecisionMetadata(
                confidence=content.confidence,
                reasoning=content.reasoning,
                alternative_options=content.alternatives,
                personality_factors=content.personality_factors,
            ),
        )

    def _notify(self, action: AIAction) -> None:
        if self.notifier is None:
            return
        safe_create_task(
            self.notifier.action_decided(action),
            name=f"notify-action-{action.id}",
        )
