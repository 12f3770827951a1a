"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from clobrelay.config import get_settings
from clobrelay.config.settings import configure_logging

app = typer.Typer(
    name="clobrelay",
    help="CLOB relay - turn simple trade requests into signed, submitted orders.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir=config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from clobrelay.cli import serve, trade  # noqa: E402

app.add_typer(serve.app, name="serve")
app.command("trade")(trade.trade)
app.command("creds")(trade.creds)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
