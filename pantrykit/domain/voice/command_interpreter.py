"""
Command Interpreter - transcript → confirmed inventory mutation

State machine:

    IDLE --start_capture--> LISTENING --submit--> PROCESSING --intent--> IDLE
    IDLE (intent pending) --confirm--> PROCESSING --commit ok/fail--> IDLE
    IDLE (intent pending) --cancel--> IDLE

Nothing is written until the user confirms. The ProcessingGuard makes a
confirm (or submit) received while PROCESSING a no-op, which is what stops
rapid repeated taps from creating duplicate items.

Only add_item is committed today; other intents end with an informational
"not supported yet" message and a cleared state.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog
from pydantic import ValidationError as ModelValidationError

from pantrykit.common.result import OperationResult
from pantrykit.common.schemas.inventory import ItemInput
from pantrykit.domain.categorization.classification_service import CategoryClassifier
from pantrykit.domain.inventory.inventory_repository import InventoryRepository
from pantrykit.domain.voice.schemas import IntentItem, IntentType, VoiceIntent
from pantrykit.transport.client import RemoteClient
from pantrykit.transport.operations import PROCESS_VOICE_COMMAND

logger = structlog.get_logger()

EMPTY_TRANSCRIPT_MESSAGE = "Please speak or type a command"
NOT_UNDERSTOOD_MESSAGE = "Sorry, I couldn't understand that command"


class InterpreterState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"


class FeedbackKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Feedback:
    """Message for the user after an interpreter step"""
    kind: FeedbackKind
    message: str


class ProcessingGuard:
    """
    Busy flag owned by one interpreter.

    try_acquire() and release() run without an await in between the check
    and the set, so on a single event loop the flag cannot be taken twice.
    """

    def __init__(self):
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def try_acquire(self) -> bool:
        if self._busy:
            return False
        self._busy = True
        return True

    def release(self) -> None:
        self._busy = False


class CommandInterpreter:
    """
    Drives one capture → interpret → confirm cycle at a time.

    Usage:
        interpreter = CommandInterpreter(client, repository)
        interpreter.start_capture()
        intent = await interpreter.submit("add 2 liters of milk")
        result = await interpreter.confirm()
    """

    def __init__(
        self,
        client: RemoteClient,
        repository: InventoryRepository,
        classifier: Optional[CategoryClassifier] = None,
        guard: Optional[ProcessingGuard] = None,
    ):
        self.client = client
        self.repository = repository
        self.classifier = classifier or CategoryClassifier()
        self.guard = guard or ProcessingGuard()

        self._state = InterpreterState.IDLE
        self.transcript = ""
        self.pending_intent: Optional[VoiceIntent] = None
        self.feedback: Optional[Feedback] = None

    @property
    def state(self) -> InterpreterState:
        if self.guard.busy:
            return InterpreterState.PROCESSING
        return self._state

    def start_capture(self) -> bool:
        """Enter LISTENING. Ignored while PROCESSING."""
        if self.guard.busy:
            return False
        self._state = InterpreterState.LISTENING
        self.feedback = None
        return True

    async def submit(self, transcript: str) -> Optional[VoiceIntent]:
        """
        Send a transcript for interpretation.

        Returns:
            The interpreted intent (also kept as pending_intent), or None when
            busy, empty or not understood
        """
        if self.guard.busy:
            logger.info("voice_submit_ignored_busy")
            return None

        text = (transcript or "").strip()
        if not text:
            self.feedback = Feedback(FeedbackKind.ERROR, EMPTY_TRANSCRIPT_MESSAGE)
            self._state = InterpreterState.IDLE
            return None

        self.guard.try_acquire()
        self.transcript = text
        try:
            result = await self.client.execute(PROCESS_VOICE_COMMAND, {"transcript": text})
            if not result.ok:
                logger.warning("voice_command_failed", error=result.error.message)
                self.feedback = Feedback(
                    FeedbackKind.ERROR,
                    OperationResult.from_error(result.error).error,
                )
                return None

            payload = result.data.get("processVoiceCommand")
            if not payload or not isinstance(payload, dict):
                self.feedback = Feedback(FeedbackKind.ERROR, NOT_UNDERSTOOD_MESSAGE)
                return None

            try:
                intent = VoiceIntent.from_remote(payload, transcript=text)
            except (ModelValidationError, TypeError) as e:
                logger.warning("voice_intent_invalid", error=str(e), payload=payload)
                self.feedback = Feedback(FeedbackKind.ERROR, NOT_UNDERSTOOD_MESSAGE)
                return None

            intent = self._fill_category(intent)
            self.pending_intent = intent
            self.feedback = None

            logger.info("voice_command_interpreted",
                       intent=intent.intent.value,
                       item_name=intent.item.name,
                       category=intent.item.category.value if intent.item.category else None,
                       confidence=intent.confidence)
            return intent
        finally:
            self.guard.release()
            self._state = InterpreterState.IDLE

    async def confirm(self) -> Optional[OperationResult]:
        """
        Commit the pending intent.

        Returns:
            The commit result, or None when busy or nothing is pending
        """
        if self.pending_intent is None:
            return None
        if not self.guard.try_acquire():
            logger.info("voice_confirm_ignored_busy")
            return None

        intent = self.pending_intent
        try:
            if intent.intent != IntentType.ADD_ITEM:
                label = intent.intent.value.replace("_", " ")
                message = f"'{label}' commands are not supported yet"
                logger.info("voice_intent_unsupported", intent=intent.intent.value)
                self.feedback = Feedback(FeedbackKind.INFO, message)
                self._clear()
                return OperationResult.failed(message)

            item = intent.item
            result = await self.repository.add_item(ItemInput(
                name=item.name,
                category=item.category.value if item.category else None,
                quantity=item.quantity,
                unit=item.unit,
                location=item.location,
            ))

            if result.success:
                logger.info("voice_command_committed",
                           item_name=item.name,
                           item_id=(result.data or {}).get("item_id"))
                self.feedback = Feedback(FeedbackKind.SUCCESS, f"Added {item.name} to your inventory")
                self._clear()
            else:
                # Intent stays pending so the user can retry or amend
                logger.warning("voice_command_commit_failed",
                              item_name=item.name,
                              error=result.error,
                              auth_required=result.auth_required)
                self.feedback = Feedback(FeedbackKind.ERROR, result.error)
            return result
        finally:
            self.guard.release()
            self._state = InterpreterState.IDLE

    def cancel(self) -> None:
        """Discard the pending intent without any remote call"""
        if self.guard.busy:
            return
        self._clear()
        self.feedback = None
        self._state = InterpreterState.IDLE

    def amend(self, **fields) -> Optional[VoiceIntent]:
        """
        Edit fields of the pending intent's item before confirming
        (name, category, quantity, unit, location).
        """
        if self.pending_intent is None or self.guard.busy:
            return None

        if "name" in fields:
            fields["normalized_name"] = fields.pop("name")
        updated = self.pending_intent.item.model_dump()
        updated.update(fields)
        self.pending_intent = self.pending_intent.model_copy(
            update={"item": IntentItem(**updated)}
        )
        return self.pending_intent

    def _fill_category(self, intent: VoiceIntent) -> VoiceIntent:
        if intent.item.category is not None or not intent.item.name:
            return intent

        classification = self.classifier.classify_rules(intent.item.name)
        logger.debug("voice_category_filled",
                    item_name=intent.item.name,
                    category=classification.category.value,
                    confidence=classification.confidence)
        item = intent.item.model_copy(update={"category": classification.category})
        return intent.model_copy(update={"item": item})

    def _clear(self) -> None:
        self.transcript = ""
        self.pending_intent = None
