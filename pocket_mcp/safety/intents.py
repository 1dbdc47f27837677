"""
Natural-language intent screening.

Free-text queries are matched against two ordered rule lists. History-style
requests (which need full transaction data from many blocks) are checked first,
then open-ended "all" requests. The first matching pattern decides the verdict,
so the order of each tuple is part of the behavior.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from pocket_mcp.config import SafetyConfig
from pocket_mcp.safety.verdict import SafetyVerdict

TRANSACTION_HISTORY = "transaction_history"
UNBOUNDED_SCOPE = "unbounded_scope"

HISTORY_REASON = (
    "Transaction history queries require fetching multiple blocks with full transaction data, "
    "which causes context overflow"
)
HISTORY_SUGGESTION = (
    "Instead:\n"
    "  - Query a specific transaction by hash if you know it\n"
    "  - Use a block explorer API (Etherscan, etc.) for transaction history\n"
    "  - Ask for current balance or state instead of history"
)
UNBOUNDED_REASON = "Query requests potentially unbounded data"
UNBOUNDED_SUGGESTION = "Add specific limits, filters, or time ranges to your query"


@dataclass(frozen=True)
class IntentPattern:
    pattern: re.Pattern
    intent: str
    label: str

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class IntentRules:
    """Ordered history rules followed by ordered unbounded-scope rules."""

    history: Tuple[IntentPattern, ...]
    unbounded: Tuple[IntentPattern, ...]


def _compile(intent: str, label: str, expression: str) -> IntentPattern:
    return IntentPattern(pattern=re.compile(expression, re.IGNORECASE), intent=intent, label=label)


DEFAULT_INTENT_RULES = IntentRules(
    history=(
        _compile(TRANSACTION_HISTORY, "transactions for address", r"get.*transaction.*for.*address"),
        _compile(TRANSACTION_HISTORY, "transaction history", r"transaction.*history"),
        _compile(TRANSACTION_HISTORY, "recent transactions", r"recent.*transactions"),
        _compile(TRANSACTION_HISTORY, "last transaction", r"last.*transaction"),
        _compile(TRANSACTION_HISTORY, "latest transaction on address", r"latest.*transaction.*on.*address"),
        _compile(TRANSACTION_HISTORY, "address transactions", r"address.*transactions"),
    ),
    unbounded=(
        _compile(UNBOUNDED_SCOPE, "get all transactions", r"get all transactions"),
        _compile(UNBOUNDED_SCOPE, "list all", r"list all"),
        _compile(UNBOUNDED_SCOPE, "fetch all", r"fetch all"),
        _compile(UNBOUNDED_SCOPE, "every transaction", r"every transaction"),
        _compile(UNBOUNDED_SCOPE, "all logs", r"all.*logs"),
    ),
)


def match_intent(text: str, rules: IntentRules = DEFAULT_INTENT_RULES) -> Optional[IntentPattern]:
    """Return the first matching pattern, history rules before unbounded rules."""
    if not isinstance(text, str) or not text:
        return None
    for candidate in rules.history:
        if candidate.matches(text):
            return candidate
    for candidate in rules.unbounded:
        if candidate.matches(text):
            return candidate
    return None


def is_transaction_history_query(text: str, rules: IntentRules = DEFAULT_INTENT_RULES) -> bool:
    if not isinstance(text, str):
        return False
    return any(candidate.matches(text) for candidate in rules.history)


def validate_query(
    text: str,
    config: Optional[SafetyConfig] = None,
    *,
    rules: IntentRules = DEFAULT_INTENT_RULES,
) -> SafetyVerdict:
    """
    Screen a natural-language query.

    ``config`` is accepted so every validator shares one call shape; none of the
    current text rules depend on numeric ceilings.
    """
    if not isinstance(text, str) or not text:
        return SafetyVerdict.ok()
    if is_transaction_history_query(text, rules):
        return SafetyVerdict.block(HISTORY_REASON, HISTORY_SUGGESTION)
    if any(candidate.matches(text) for candidate in rules.unbounded):
        return SafetyVerdict.block(UNBOUNDED_REASON, UNBOUNDED_SUGGESTION)
    return SafetyVerdict.ok()
