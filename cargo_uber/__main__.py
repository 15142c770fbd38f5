"""Allow ``python -m cargo_uber``."""

from cargo_uber.cli import main

main()
