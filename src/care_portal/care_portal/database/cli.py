"""`flask --app app <command>` database maintenance for the care portal."""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path

import click
from flask import Flask, current_app
from flask.cli import with_appcontext

from .bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables

REPO_ROOT = Path(__file__).resolve().parents[4]
SCHEMA_PATH = REPO_ROOT / "database" / "schema.sql"
SEED_PATH = REPO_ROOT / "database" / "seed.sql"
BACKUP_DIR = REPO_ROOT / "backups"


def _target(db_config: dict) -> str:
    return (
        f"{db_config.get('user')}@{db_config.get('host')}:"
        f"{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


def mysqldump_command(db_config: dict) -> list[str]:
    return [
        "mysqldump",
        f"-h{db_config['host']}",
        f"-P{db_config.get('port', 3306)}",
        f"-u{db_config['user']}",
        f"-p{db_config['password']}",
        "--single-transaction",
        "--routines",
        db_config["database"],
    ]


@click.command("init-db")
@with_appcontext
@click.option("--seed", is_flag=True, default=False, help="Also load demo care homes and accounts.")
def init_db_command(seed: bool) -> None:
    """Create the care portal tables."""
    db_config = current_app.config["DB_CONFIG"]
    apply_schema(db_config, schema_path=SCHEMA_PATH)
    click.echo(f"Care portal schema ready on {_target(db_config)} ({len(list_tables(db_config))} tables)")
    if seed:
        _seed(db_config)


@click.command("seed-db")
@with_appcontext
def seed_db_command() -> None:
    """Load demo care homes, residents and one account per role."""
    _seed(current_app.config["DB_CONFIG"])


def _seed(db_config: dict) -> None:
    apply_seed_sql(db_config, seed_path=SEED_PATH)
    ensure_demo_users(db_config)
    click.echo(f"Demo residents and staff accounts loaded into {_target(db_config)}")


@click.command("backup-db")
@with_appcontext
@click.option(
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=BACKUP_DIR,
    show_default=True,
    help="Where the dump file is written.",
)
def backup_db_command(out_dir: Path) -> None:
    """Dump the care portal database with `mysqldump` (needs the MySQL client tools)."""
    db_config = current_app.config["DB_CONFIG"]
    out_dir.mkdir(parents=True, exist_ok=True)
    out_file = out_dir / f"care_portal_{db_config['database']}_{datetime.now():%Y%m%d_%H%M%S}.sql"

    try:
        with out_file.open("wb") as f:
            subprocess.run(mysqldump_command(db_config), stdout=f, stderr=subprocess.PIPE, check=True)
    except FileNotFoundError:
        out_file.unlink(missing_ok=True)
        raise click.ClickException("mysqldump is not installed; the care portal backup needs the MySQL client tools")
    except subprocess.CalledProcessError as exc:
        out_file.unlink(missing_ok=True)
        raise click.ClickException(f"Care portal backup failed: {exc.stderr.decode('utf-8', 'replace').strip()}")
    click.echo(f"Care portal backup written to {out_file}")


def register_cli(app: Flask) -> None:
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_db_command)
    app.cli.add_command(backup_db_command)
