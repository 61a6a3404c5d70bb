from .log import DecisionLog, InMemoryDecisionLog, JsonlDecisionLog, PostgrestDecisionLog, record_decision

__all__ = [
    "DecisionLog",
    "InMemoryDecisionLog",
    "JsonlDecisionLog",
    "PostgrestDecisionLog",
    "record_decision",
]
