"""
Field rule registry.

Maps a descriptor's semantic type ("text", "email", ...) to the rule class
that compiles it. New types plug in with the decorator, no compiler change
needed.
"""

from typing import Dict, Optional, Type

from modules.registration.validation.core.base import FieldRule
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

# Global registry of all field rules
RULE_REGISTRY: Dict[str, Type[FieldRule]] = {}


def register_rule(semantic_type: str):
    """
    Decorator to register a rule class for a semantic type.

    Usage:
        @register_rule("email")
        class EmailRule(TextRule):
            ...

    Args:
        semantic_type: Descriptor ``type`` value handled by the class

    Returns:
        Decorator function
    """
    def decorator(cls: Type[FieldRule]):
        if semantic_type in RULE_REGISTRY:
            logger.warning(
                f"Rule for type '{semantic_type}' is already registered. "
                f"Overwriting with {cls.__name__}"
            )

        RULE_REGISTRY[semantic_type] = cls
        logger.debug(f"Registered rule: {semantic_type} -> {cls.__name__}")
        return cls

    return decorator


def get_rule(semantic_type: str) -> Optional[Type[FieldRule]]:
    """
    Get rule class by semantic type.

    Returns:
        Rule class or None if the type is unknown
    """
    return RULE_REGISTRY.get(semantic_type)


def list_rules() -> Dict[str, str]:
    """
    List all registered rules.

    Returns:
        Dictionary mapping semantic types to class names
    """
    return {
        name: cls.__name__
        for name, cls in RULE_REGISTRY.items()
    }
