"""MyContext app scaffolder.

Creates a new Next.js project from a bundled template, fills its
``_my_context/`` directory with requirement documents from the MyContext
platform, and runs the package-manager setup.
"""

__version__ = "0.3.0"
