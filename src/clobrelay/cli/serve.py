"""API server command."""

import typer

from clobrelay.api.main import run_api

app = typer.Typer(help="Start the relay HTTP server")


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host", help="Bind host (default: [server].host)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (default: [server].port or $PORT)"),
) -> None:
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    run_api(
        host=host or settings.host,
        port=port or settings.port,
        profile=ctx.obj.get("profile"),
    )


if __name__ == "__main__":
    app()
