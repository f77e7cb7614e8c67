from __future__ import annotations

import click
from flask import Flask

from ..container import Container


def register_cli(app: Flask, container: Container) -> None:
    @app.cli.command("compliance-alerts")
    @click.option("--force", is_flag=True, default=False, help="Run even outside the scheduled minute.")
    def compliance_alerts_command(force: bool) -> None:
        """Raise ISP and fire evacuation review alerts. Meant to be called from cron every minute."""
        created = container.compliance_service.run_scheduled_alerts(force=force)
        if created is None:
            click.echo("Not the scheduled alert time; nothing to do")
        else:
            click.echo(f"{created} compliance alert(s) raised")
