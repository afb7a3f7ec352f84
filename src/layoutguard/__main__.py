"""Allow ``python -m layoutguard``."""

from layoutguard.cli import main

main()
