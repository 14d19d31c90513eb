"""
TierGen command-line entrypoint.
Reads a database catalog, generates the layered solution and writes it to disk.
"""
from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from tiergen import __version__
from tiergen.core.config import Settings, settings as default_settings
from tiergen.core.exceptions import SchemaReadError, TierGenException
from tiergen.db.reflection import SchemaReader
from tiergen.db.session import create_engine
from tiergen.schemas.artifact import GenerationResult
from tiergen.schemas.schema import Table
from tiergen.services.generation_service import GenerationService
from tiergen.services.project_composer import CONSOLE_PROJECT
from tiergen.services.writer_service import writer_service

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]


# ── Argument parsing ──────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tiergen",
        description=(
            "3-Tier Architecture Solution Generator: reads a SQL Server database "
            "and writes a DTO/DAL/BLL/ConsoleApp C# solution for it."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--server", help="Database server name")
    parser.add_argument("--database", help="Database name; also names the solution")
    auth = parser.add_mutually_exclusive_group()
    auth.add_argument(
        "--windows-auth", dest="trusted", action="store_true", default=None,
        help="Use Windows (integrated) authentication",
    )
    auth.add_argument(
        "--sql-auth", dest="trusted", action="store_false", default=None,
        help="Use SQL Server authentication with --user/--password",
    )
    parser.add_argument("--user", help="SQL Server login")
    parser.add_argument("--password", help="SQL Server password (prompted when omitted)")
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy async URL to reflect instead of --server/--database",
    )
    parser.add_argument("--output", help="Folder the solution is written to")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


# ── Connection details ────────────────────────────────────────────────────────

def resolve_settings(
    args: argparse.Namespace,
    base: Settings,
    *,
    prompt: Prompt = input,
    secret_prompt: Prompt = getpass.getpass,
) -> Settings:
    """
    Merge command-line options over the environment settings.
    Anything still missing is asked for interactively: server, database,
    authentication mode, then SQL credentials.
    """
    update: dict[str, object] = {}
    if args.database_url:
        update["DATABASE_URL"] = args.database_url
    server = args.server or base.DB_SERVER
    database = args.database or base.DB_NAME
    database_url = args.database_url or base.DATABASE_URL
    trusted = args.trusted

    if not database_url:
        interactive = not (server and database)
        if not server:
            server = prompt("Enter server name: ").strip()
        if not database:
            database = prompt("Enter database name: ").strip()
        if trusted is None:
            if interactive:
                answer = prompt("Use Windows authentication? (Y/N): ")
                trusted = answer.strip().upper() == "Y"
            else:
                trusted = base.DB_TRUSTED_CONNECTION
        update["DB_TRUSTED_CONNECTION"] = trusted

        if not trusted:
            user = args.user or base.DB_USER or prompt("Enter username: ").strip()
            password = args.password or base.DB_PASSWORD
            if password is None:
                password = secret_prompt("Enter password: ")
            update["DB_USER"] = user
            update["DB_PASSWORD"] = password
    elif trusted is not None:
        update["DB_TRUSTED_CONNECTION"] = trusted

    if server:
        update["DB_SERVER"] = server
    if database:
        update["DB_NAME"] = database
    return base.model_copy(update=update)


def resolve_output(args: argparse.Namespace, config: Settings, *, prompt: Prompt = input) -> Path | None:
    raw = args.output or config.OUTPUT_DIR
    if raw is None:
        raw = prompt("Enter the full path for the solution folder: ")
    raw = raw.strip()
    if not raw:
        return None
    return Path(raw).expanduser().resolve()


# ── Run ───────────────────────────────────────────────────────────────────────

async def read_schema(config: Settings) -> list[Table]:
    try:
        engine = create_engine(config)
    except (SQLAlchemyError, ImportError) as exc:
        raise SchemaReadError(f"Could not connect to the database: {exc}") from exc
    try:
        return await SchemaReader(config.EXCLUDED_SCHEMAS).read_tables(engine)
    finally:
        await engine.dispose()


def print_summary(output: Path, result: GenerationResult) -> None:
    print(f"\nSolution generated successfully at: {output}")
    print("Project references needed:")
    step = 1
    for project in reversed(result.projects):
        for reference in project.references:
            print(f"{step}. {project.name} -> {reference}")
            step += 1
    print(f"{step}. Add database connection string to {CONSOLE_PROJECT}/App.config")
    if result.skipped:
        print("Skipped tables (names unusable as C# identifiers): " + ", ".join(result.skipped))


def configure_logging(config: Settings, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose or config.DEBUG else config.LOG_LEVEL,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    prompt: Prompt = input,
    secret_prompt: Prompt = getpass.getpass,
) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(default_settings, args.verbose)

    print("3-Tier Architecture Solution Generator")
    print("=======================================\n")

    try:
        config = resolve_settings(args, default_settings, prompt=prompt, secret_prompt=secret_prompt)
        tables = asyncio.run(read_schema(config))
        if not tables:
            print("No tables found in the database.")
            return 0

        output = resolve_output(args, config, prompt=prompt)
        if output is None:
            print("Invalid path. Exiting.")
            return 1

        result = GenerationService(
            target_framework=config.TARGET_FRAMEWORK,
            lang_version=config.LANG_VERSION,
        ).generate(
            tables,
            solution_name=config.solution_name,
            connection_string=config.ado_connection_string,
        )
        if result.is_empty:
            print("None of the tables could be generated: " + ", ".join(result.skipped))
            return 1
        writer_service.write_artifacts(output, result.artifacts)
    except TierGenException as exc:
        logger.debug("Generation aborted: %s (%s)", exc.detail, exc.error_code)
        print(f"Error: {exc.detail}")
        return 1

    print_summary(output, result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
