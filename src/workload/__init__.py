"""
Synthetic Workload Module.

Entity schemas, the scenario catalog and the generator producing
referentially consistent sellers, buyers, conversations and messages.
"""

from src.workload.generator import EntityGenerator, GeneratedWorkload
from src.workload.models import (
    Buyer,
    Conversation,
    ConversationStatus,
    EntityType,
    Message,
    MessageType,
    Platform,
    Seller,
    SenderType,
)
from src.workload.scenarios import (
    BENCHMARK_CATEGORIES,
    SCENARIOS,
    WorkloadScenario,
    get_scenario,
    list_scenarios,
)

__all__ = [
    # Models
    "Seller",
    "Buyer",
    "Conversation",
    "Message",
    "Platform",
    "SenderType",
    "MessageType",
    "ConversationStatus",
    "EntityType",
    # Scenarios
    "WorkloadScenario",
    "BENCHMARK_CATEGORIES",
    "SCENARIOS",
    "get_scenario",
    "list_scenarios",
    # Generator
    "EntityGenerator",
    "GeneratedWorkload",
]
