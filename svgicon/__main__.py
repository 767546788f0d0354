"""Allow ``python -m svgicon``."""

import sys

from .cli import main

main(sys.argv[1:])
