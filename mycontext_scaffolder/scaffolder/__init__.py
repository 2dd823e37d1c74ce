"""Project scaffolding: template copy, context injection, dependency setup.

Quick usage::

    from mycontext_scaffolder.scaffolder import Scaffolder

    result = await Scaffolder(config, settings).run()
    if not result.success:
        ...
"""

from .dependencies import DependencySetup
from .layout import ProjectLayout
from .orchestrator import CleanupStatus, ScaffoldResult, ScaffoldState, Scaffolder

__all__ = [
    "CleanupStatus",
    "DependencySetup",
    "ProjectLayout",
    "ScaffoldResult",
    "ScaffoldState",
    "Scaffolder",
]
