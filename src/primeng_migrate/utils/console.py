"""
Console and Logging Utilities.

All user-facing output of primeng-migrate flows through the standard
`logging` library rendered by a `rich` handler, or directly through the shared
`console` object for tables, diffs and prompts.

The console is a proxy so the destination can be swapped at runtime
(`set_console`). Tests use this to capture output in a recording console; the
logging handler is re-bound to the new destination on every swap.

Attributes:
    console (_ConsoleProxy): Stable, module-level reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.theme import Theme

LOGGER_NAME = "primeng_migrate"

# Between INFO (20) and WARNING (30)
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "rule": "bold magenta",
  }
)

logger = logging.getLogger(LOGGER_NAME)


class _ConsoleProxy:
  """
  Forwards printing to a swappable `rich.console.Console` backend.

  Modules import the module-level `console` once; swapping the backend via
  `set_backend` redirects both direct prints and the package logger.
  """

  def __init__(self) -> None:
    self._backend: Console = Console(theme=THEME)
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and re-binds the logging handler.

    Args:
        new_console (Console): The Rich Console to write to from now on.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """Restores a fresh standard output console."""
    self._backend = Console(theme=THEME)
    self._configure_logging()

  @property
  def backend(self) -> Console:
    return self._backend

  def _configure_logging(self) -> None:
    """
    Replaces the RichHandler on the package logger with one bound to the active backend.
    """
    for handler in list(logger.handlers):
      if isinstance(handler, RichHandler):
        logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
    logger.setLevel(logging.INFO)
    logger.addHandler(rich_handler)
    logger.propagate = False

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def export_text(self, **kwargs: Any) -> str:
    """
    Returns text recorded by the backend (requires ``Console(record=True)``).

    Args:
        **kwargs: Options passed to ``Console.export_text``.

    Returns:
        str: The captured output.
    """
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Redirects console output and package logging to `new_console`.

  Args:
      new_console (Console): The configured Rich console to use.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Resets logging and console to standard output."""
  console.reset()


def get_console() -> Console:
  """
  Retrieves the currently active console backend.

  Returns:
      Console: The active Rich Console.
  """
  return console.backend


def print_diff(diff_text: str) -> None:
  """
  Renders a unified diff with syntax highlighting.

  Args:
      diff_text (str): Output of ``difflib.unified_diff`` joined into one string.
  """
  if not diff_text:
    return
  console.print(Syntax(diff_text, "diff", theme="ansi_dark", background_color="default"))


def log_info(msg: str) -> None:
  """
  Logs an informational message.

  Args:
      msg (str): The message content. May include rich markup like [path].
  """
  logger.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  """
  Logs a success message at the custom SUCCESS level.

  Args:
      msg (str): The message content.
  """
  logger.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  """
  Logs a warning message.

  Args:
      msg (str): The message content.
  """
  logger.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error message.

  Args:
      msg (str): The message content.
  """
  logger.error(f"❌ {msg}", extra={"markup": True})
