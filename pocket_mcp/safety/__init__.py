"""Pre-execution query safety validation."""

from .classifier import DANGEROUS_METHODS, MethodRisk, classify, is_dangerous_method, method_risk
from .engine import SAFE_ALTERNATIVES, validate_call, validate_natural_language_query
from .estimator import estimate_response_size
from .intents import (
    DEFAULT_INTENT_RULES,
    IntentPattern,
    IntentRules,
    is_transaction_history_query,
    match_intent,
    validate_query,
)
from .ranges import check_block_query, check_log_query, parse_block_number, wants_transactions
from .verdict import SafetyVerdict

__all__ = [
    "DANGEROUS_METHODS",
    "MethodRisk",
    "classify",
    "is_dangerous_method",
    "method_risk",
    "SAFE_ALTERNATIVES",
    "validate_call",
    "validate_natural_language_query",
    "estimate_response_size",
    "DEFAULT_INTENT_RULES",
    "IntentPattern",
    "IntentRules",
    "is_transaction_history_query",
    "match_intent",
    "validate_query",
    "check_block_query",
    "check_log_query",
    "parse_block_number",
    "wants_transactions",
    "SafetyVerdict",
]
