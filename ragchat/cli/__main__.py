"""Allow ``python -m ragchat.cli``."""

from ragchat.cli.app import main

main()
