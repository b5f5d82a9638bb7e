"""
Version Control Package.

Wraps the external ``git`` executable used to protect and record migration steps.
"""

from primeng_migrate.vcs.git import GitClient

__all__ = ["GitClient"]
