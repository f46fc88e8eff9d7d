"""Allow ``python -m unstream.cli`` execution."""

from unstream.cli.search import main

main()
