"""Core business logic components.

This module exports the main business logic classes:
- Agent: Host that feeds chat messages through the pipeline
- MessageHandler: Orchestrates detection, classification and replies
- TriggerDetector: Recognizes the activation phrase
- IntentClassifier: Maps free text to an intent
- EarningsEngine: Aggregates payouts from the ledger
- ReplyFormatter: Renders reply text
"""

from mylo_assistant.core.agent import Agent, create_agent
from mylo_assistant.core.amounts import parse_amount
from mylo_assistant.core.earnings import EarningsEngine
from mylo_assistant.core.intent_classifier import IntentClassifier
from mylo_assistant.core.message_handler import MessageHandler
from mylo_assistant.core.replies import ReplyFormatter, split_message
from mylo_assistant.core.trigger import TriggerDetector, TriggerMatch

__all__ = [
    "Agent",
    "EarningsEngine",
    "IntentClassifier",
    "MessageHandler",
    "ReplyFormatter",
    "TriggerDetector",
    "TriggerMatch",
    "create_agent",
    "parse_amount",
    "split_message",
]
