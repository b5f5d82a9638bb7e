from .migrate import handle_run, _print_run_summary, _write_json_report
from .listing import handle_list
from .manifests import handle_deps, handle_theme

__all__ = [
  "_print_run_summary",
  "_write_json_report",
  "handle_deps",
  "handle_list",
  "handle_run",
  "handle_theme",
]
