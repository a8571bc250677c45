"""CLI commands for leaderlock.

Provides command-line interface using Typer:
- leaderlock provision: Ensure the lock bucket exists
- leaderlock status: Show bucket TTL and current holder
- leaderlock release: Release the lock held by an identity
- leaderlock campaign: Run a leader election until interrupted

Usage:
    leaderlock --help
    leaderlock provision --bucket orders --ttl 30
    leaderlock status --bucket orders
    leaderlock campaign --bucket orders
"""

import typer

from leaderlock.cli.campaign_cmd import app as campaign_app
from leaderlock.cli.provision_cmd import app as provision_app
from leaderlock.cli.release_cmd import app as release_app
from leaderlock.cli.status_cmd import app as status_app

app = typer.Typer(
    name="leaderlock",
    help="leaderlock: TTL lease leader election over a shared key-value store",
    no_args_is_help=True,
)

app.add_typer(provision_app, name="provision")
app.add_typer(status_app, name="status")
app.add_typer(release_app, name="release")
app.add_typer(campaign_app, name="campaign")


@app.callback()
def callback() -> None:
    """leaderlock: TTL lease leader election over a shared key-value store."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
