"""dbcli entry point.

JSON-only output; commands that change settings write them back before
reporting success.
"""

import click

from dbcli.cli.config import create_context
from dbcli.cli.registry import register_all_commands


@click.group()
@click.option(
    "--config-dir",
    envvar="DBCLI_CONFIG_DIR",
    type=click.Path(file_okay=False),
    help="Override the directory holding settings.json",
)
@click.pass_context
def cli(ctx: click.Context, config_dir: str | None) -> None:
    """dbcli - database platform client.

    All commands output JSON for reliable parsing.
    """
    ctx.ensure_object(dict)
    if "cli_context" not in ctx.obj:
        ctx.obj["cli_context"] = create_context(config_dir=config_dir)

    ctx.obj["cli_context"].config.setup_logging()


register_all_commands(cli)


if __name__ == "__main__":
    cli()
