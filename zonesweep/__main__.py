"""Allow ``python -m zonesweep``."""

from zonesweep.cli.main import main

main()
