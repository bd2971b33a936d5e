"""
Rule Base Class and Registry.

A rule is a `NodeVisitor` that reacts to traversal events and reports
findings through its `RuleContext`. Rules are registered by id with the
`@register_rule` decorator and instantiated fresh for every lint run, so
per-run state lives on the instance.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from pydantic import BaseModel, Field

from unwrap_lint.core.visitor import NodeVisitor

if TYPE_CHECKING:
  from unwrap_lint.core.engine import RuleContext


class RuleMeta(BaseModel):
  """
  Static description of a rule.
  """

  name: str = Field(..., description="Unique rule id (kebab-case).")
  type: str = Field("problem", description="One of 'problem', 'suggestion' or 'layout'.")
  fixable: Optional[str] = Field(None, description="'code' if the rule offers auto-fixes.")
  description: str = Field("", description="One line summary.")
  recommended: str = Field("error", description="Severity in the recommended preset.")
  requires_type_checking: bool = Field(False, description="True if the rule is meant for type-aware setups.")
  messages: Dict[str, str] = Field(default_factory=dict, description="Message id to message text.")
  default_options: Dict[str, Any] = Field(default_factory=dict, description="Option defaults.")


class Rule(NodeVisitor):
  """
  Base class for lint rules.

  Subclasses set `meta` and implement `visit_*` / `leave_*` handlers.

  Attributes:
      meta (RuleMeta): Rule metadata, including the message catalog.
      context (RuleContext): Reporting channel for the current run.
      options (Dict[str, Any]): Effective options (defaults merged with user options).
  """

  meta: RuleMeta

  def __init__(self, context: "RuleContext"):
    self.context = context
    self.options: Dict[str, Any] = {**self.meta.default_options, **context.options}


_RULE_REGISTRY: Dict[str, Type[Rule]] = {}


def register_rule(name: str):
  """
  Class decorator registering a rule under `name`.

  Args:
      name (str): The rule id.
  """

  def wrapper(cls: Type[Rule]) -> Type[Rule]:
    _RULE_REGISTRY[name] = cls
    return cls

  return wrapper


def get_rule(name: str) -> Type[Rule]:
  """
  Looks up a registered rule class.

  Args:
      name (str): The rule id.

  Returns:
      Type[Rule]: The rule class.

  Raises:
      KeyError: If no rule is registered under `name`.
  """
  try:
    return _RULE_REGISTRY[name]
  except KeyError:
    raise KeyError(f"Unknown rule '{name}'. Available: {', '.join(available_rules())}") from None


def available_rules() -> List[str]:
  """Returns the sorted ids of all registered rules."""
  return sorted(_RULE_REGISTRY)
