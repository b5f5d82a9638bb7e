"""
Operator Confirmation.

The engine never talks to stdin directly. It receives a `Prompter` chosen from
the runtime configuration:

- `ConsolePrompter` asks interactively through `rich.prompt.Confirm`.
- `AutoPrompter` answers every question with a fixed value (``--yes`` mode,
  programmatic use, tests).
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from rich.prompt import Confirm

from primeng_migrate.config import RuntimeConfig
from primeng_migrate.utils.console import get_console


class Prompter(ABC):
  """
  Base interface for yes/no questions.
  """

  @abstractmethod
  def confirm(self, question: str, default: bool = True) -> bool:
    raise NotImplementedError


class ConsolePrompter(Prompter):
  """
  Asks the operator on the active console.
  """

  def confirm(self, question: str, default: bool = True) -> bool:
    """
    Prompts for a yes/no answer.

    Args:
        question (str): Text shown to the operator.
        default (bool): Answer used when the operator just presses Enter.

    Returns:
        bool: The operator's answer.
    """
    return Confirm.ask(question, default=default, console=get_console())


class AutoPrompter(Prompter):
  """
  Answers every question with the same value and records what was asked.

  Attributes:
      answer (bool): The fixed answer.
      asked (List[str]): Questions received, in order.
  """

  def __init__(self, answer: bool = True) -> None:
    self.answer = answer
    self.asked: List[str] = []

  def confirm(self, question: str, default: bool = True) -> bool:
    self.asked.append(question)
    return self.answer


def build_prompter(config: RuntimeConfig, override: Optional[Prompter] = None) -> Prompter:
  """
  Selects the prompter implied by the configuration.

  Args:
      config (RuntimeConfig): Active configuration.
      override (Prompter, optional): Explicit prompter that wins over configuration.

  Returns:
      Prompter: `AutoPrompter(True)` when ``assume_yes`` is set, otherwise `ConsolePrompter`.
  """
  if override is not None:
    return override
  if config.assume_yes:
    return AutoPrompter(True)
  return ConsolePrompter()
