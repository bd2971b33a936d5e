"""
Lint Rules Package.

Importing this package registers the bundled rules.

Modules:
    - ``base``: `Rule` base class, `RuleMeta` and the rule registry.
    - ``consistent_unwrap``: wrap type arguments versus unwrapped calls.
"""

from unwrap_lint.rules.base import Rule, RuleMeta, available_rules, get_rule, register_rule
from unwrap_lint.rules.consistent_unwrap import ConsistentUnwrap, WrapScope

__all__ = [
  "ConsistentUnwrap",
  "Rule",
  "RuleMeta",
  "WrapScope",
  "available_rules",
  "get_rule",
  "register_rule",
]
