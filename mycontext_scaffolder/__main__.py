"""Allow ``python -m mycontext_scaffolder``."""

from mycontext_scaffolder.cli import main

main()
