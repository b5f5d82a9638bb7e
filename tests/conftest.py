"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Console isolation so output captured by one test never leaks into the next.
- A throwaway Angular project layout under ``tmp_path``.
"""

import sys
import pytest
from pathlib import Path

from rich.console import Console

# Add src to path so we can import 'primeng_migrate' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from primeng_migrate.utils.console import THEME, reset_console, set_console  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_console():
  """
  Restores the standard console after every test.
  """
  yield
  reset_console()


@pytest.fixture
def recorded_console():
  """
  Routes console output and logging to a recording console.

  Returns:
      Console: Call ``export_text()`` on it to read what was printed.
  """
  rec = Console(record=True, width=200, force_terminal=False, theme=THEME)
  set_console(rec)
  return rec


@pytest.fixture
def project(tmp_path):
  """
  Creates an empty Angular-like project root with a ``src`` folder.

  Returns:
      Path: The project root.
  """
  (tmp_path / "src" / "app").mkdir(parents=True)
  return tmp_path


@pytest.fixture
def write_file():
  """
  Returns a helper writing UTF-8 content (byte for byte) below a root.
  """

  def _write(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content.encode("utf-8"))
    return path

  return _write
