"""
Voice Module - spoken or typed commands → inventory mutations

Flow:
1. Transcript → remote processVoiceCommand → VoiceIntent
2. Missing category filled by the keyword rules
3. User confirms → InventoryRepository.add_item
"""

from pantrykit.domain.voice.command_interpreter import (
    CommandInterpreter,
    Feedback,
    FeedbackKind,
    InterpreterState,
    ProcessingGuard,
)
from pantrykit.domain.voice.schemas import IntentItem, IntentType, VoiceIntent

__all__ = [
    'CommandInterpreter',
    'Feedback',
    'FeedbackKind',
    'InterpreterState',
    'ProcessingGuard',
    'IntentItem',
    'IntentType',
    'VoiceIntent',
]
