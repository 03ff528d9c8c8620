"""dbcli module entry point.

Enables running the CLI via: python -m dbcli.cli
"""

from dbcli.cli.main import cli

if __name__ == "__main__":
    cli()
