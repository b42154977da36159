"""Allow ``python -m repobot``."""

import sys

from .cli import main

main(sys.argv[1:])
