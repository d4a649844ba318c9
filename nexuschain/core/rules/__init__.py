"""
Validation rule engine, configuration management and built-in rule sets.
"""

from .rule_config import RuleConfigBuilder, RuleConfigLoader
from .rule_engine import RuleEngine
from .rule_sets import checkpoint_rules, registration_rules

__all__ = [
    "RuleEngine",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "registration_rules",
    "checkpoint_rules",
]
