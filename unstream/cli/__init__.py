"""Command-line tools for unstream.

- ``python -m unstream.cli.search "<query>"``: run one search (and
  optionally the enrichment phase) and print the results.
"""
