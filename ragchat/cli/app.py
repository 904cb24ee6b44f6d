# =============================================================================
# ragchat/cli/app.py - ragchat command-line interface
# =============================================================================
#
# Front end over the ingestion and chat services.  Every command builds
# the components from Settings (ragchat.main.build_components), runs one
# async handler under asyncio.run, closes the store connection, and exits
# with a status code.
#
# Supported subcommands:
#
#   setup-db  - Check for and create the documents/sections tables
#   add       - Ingest a UTF-8 text file under its base name
#   list      - Show stored documents with their section counts
#   delete    - Remove a document (and its sections) by ID or exact name
#   ask       - Answer one question from the stored documents
#   chat      - Interactive question loop ("exit" or Ctrl-D to leave)
#
# Before add, ask and chat run, missing credentials and an incomplete
# database raise typed errors; the handler maps every RagChatError to an
# exit code and a short hint instead of a traceback.
#
# Usage examples:
#   ragchat setup-db
#   ragchat add notes.txt
#   ragchat list
#   ragchat delete notes.txt --yes
#   ragchat ask "What is alpha?"
#   python -m ragchat.cli chat
# =============================================================================

"""Command-line interface for ragchat.

Usage::

    ragchat setup-db [--check]
    ragchat add FILE
    ragchat list
    ragchat delete NAME_OR_ID [--yes]
    ragchat ask QUESTION [--threshold T] [--limit N] [--show-context]
    ragchat chat
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable

import structlog

from ragchat.config.settings import Settings
from ragchat.main import build_components, require_setup
from ragchat.utils.errors import (
    AmbiguousNameError,
    ConfigurationError,
    EmbeddingError,
    NotFoundError,
    RagChatError,
    StoreSetupError,
    StoreWriteError,
)
from ragchat.utils.logging import configure_logging

logger = structlog.get_logger(logger_name=__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_NOT_FOUND = 3

_EXIT_COMMANDS = frozenset({"exit", "quit"})

Handler = Callable[[argparse.Namespace, Settings, dict[str, Any]], Awaitable[int]]


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_setup_db(
    args: argparse.Namespace, app_settings: Settings, components: dict[str, Any]
) -> int:
    """Report missing store components and create them unless ``--check``."""
    store = components["vector_store"]
    status = await store.check_setup()
    if status.all_exist:
        print("Database is already set up.")
        return EXIT_OK

    print("Missing database components:")
    for item in status.missing:
        print(f"  - {item}")

    if args.check:
        return EXIT_ERROR

    await store.setup()
    status = await store.check_setup()
    if not status.all_exist:
        raise StoreSetupError(missing=status.missing, provider_name=store.get_provider_name())
    print(f"Database set up at {app_settings.sqlite_db_path}.")
    return EXIT_OK


async def _handle_add(
    args: argparse.Namespace, app_settings: Settings, components: dict[str, Any]
) -> int:
    app_settings.require_credentials()
    await require_setup(components["vector_store"])

    path = Path(args.file)
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return EXIT_ERROR

    print(f"Adding document: {path.name}")
    try:
        result = await components["ingestion_service"].ingest_file(path)
    except UnicodeDecodeError as exc:
        print(f"Error: {path} is not valid UTF-8 text ({exc.reason}).", file=sys.stderr)
        return EXIT_ERROR
    except OSError as exc:
        print(f"Error: Could not read {path}: {exc.strerror or exc}", file=sys.stderr)
        return EXIT_ERROR

    print("\nIngestion complete:")
    print(f"  Document ID:      {result.document_id}")
    print(f"  Name:             {result.document_name}")
    print(f"  Sections created: {result.sections_created}")
    print(f"  Time:             {result.ingestion_time:.2f}s")
    if result.sections_created == 0:
        print("  Note: the file had no text, so nothing from it can be retrieved.")
    return EXIT_OK


async def _handle_list(
    args: argparse.Namespace, app_settings: Settings, components: dict[str, Any]
) -> int:
    store = components["vector_store"]
    await require_setup(store)

    documents = await store.list_documents()
    if not documents:
        print("No documents found. Add one with `ragchat add FILE`.")
        return EXIT_OK

    print(f"{'ID':>6}  {'Sections':>8}  {'Created':<19}  Name")
    print("-" * 60)
    for doc in documents:
        created = doc.created_at.strftime("%Y-%m-%d %H:%M:%S") if doc.created_at else "-"
        print(f"{doc.id:>6}  {doc.section_count:>8}  {created:<19}  {doc.name}")
    print(f"\n{len(documents)} document(s).")

    orphans = [doc for doc in documents if doc.section_count == 0]
    if orphans:
        print(
            f"{len(orphans)} document(s) have no sections and cannot be retrieved; "
            "remove them with `ragchat delete ID`."
        )
    return EXIT_OK


async def _handle_delete(
    args: argparse.Namespace, app_settings: Settings, components: dict[str, Any]
) -> int:
    store = components["vector_store"]
    await require_setup(store)

    document_id = await store.find_by_name_or_id(args.identifier)
    document = await store.get_document(document_id)

    if not args.yes:
        confirm = input(
            f'Delete document {document_id} ("{document.name}") and its sections? [y/N] '
        ).strip().lower()
        if confirm not in ("y", "yes"):
            print("Aborted.")
            return EXIT_OK

    await store.delete_document(document_id)
    print(f'Deleted document {document_id} ("{document.name}").')
    return EXIT_OK


async def _handle_ask(
    args: argparse.Namespace, app_settings: Settings, components: dict[str, Any]
) -> int:
    app_settings.require_credentials()
    await require_setup(components["vector_store"])

    question = " ".join(args.question).strip()
    if not question:
        print("Error: Question must not be empty.", file=sys.stderr)
        return EXIT_ERROR

    answer = await components["chat_service"].ask(
        question, threshold=args.threshold, limit=args.limit
    )
    if args.show_context:
        print(answer.context)
        print("-" * 60)
    print(answer.answer)
    return EXIT_OK


async def _handle_chat(
    args: argparse.Namespace, app_settings: Settings, components: dict[str, Any]
) -> int:
    app_settings.require_credentials()
    await require_setup(components["vector_store"])

    chat_service = components["chat_service"]
    print('Ask questions about your documents. Type "exit" to quit.')
    while True:
        try:
            question = input("\nYou: ").strip()
        except EOFError:
            print()
            break
        if not question:
            continue
        if question.lower() in _EXIT_COMMANDS:
            break

        try:
            answer = await chat_service.ask(question)
        except RagChatError as exc:
            # One failed question does not end the session.
            _report_error(exc)
            continue
        print(f"\nAssistant: {answer.answer}")

    print("Goodbye.")
    return EXIT_OK


_HANDLERS: dict[str, Handler] = {
    "setup-db": _handle_setup_db,
    "add": _handle_add,
    "list": _handle_list,
    "delete": _handle_delete,
    "ask": _handle_ask,
    "chat": _handle_chat,
}


# ---------------------------------------------------------------------------
# Error reporting
# ---------------------------------------------------------------------------


def _hint_for(exc: RagChatError) -> str | None:
    if isinstance(exc, StoreSetupError):
        return None  # message already names the fix
    if isinstance(exc, ConfigurationError):
        return "Set the missing values in the environment or a .env file."
    if isinstance(exc, AmbiguousNameError):
        return "Run `ragchat list` to see the IDs."
    if isinstance(exc, NotFoundError):
        return "Run `ragchat list` to see stored documents."
    if isinstance(exc, EmbeddingError) and exc.document_id is not None:
        return (
            f"Section {exc.chunk_index} could not be embedded. Document "
            f"{exc.document_id} may be left without sections; check `ragchat list`."
        )
    if isinstance(exc, StoreWriteError) and exc.stage == "bulk_insert":
        return (
            f"No sections were stored. Document {exc.document_id} may be left "
            "without sections; check `ragchat list`."
        )
    return None


def _exit_code_for(exc: RagChatError) -> int:
    if isinstance(exc, ConfigurationError):
        return EXIT_CONFIG
    if isinstance(exc, (NotFoundError, AmbiguousNameError)):
        return EXIT_NOT_FOUND
    return EXIT_ERROR


def _report_error(exc: RagChatError) -> int:
    logger.debug("command_failed", error=str(exc), error_type=type(exc).__name__)
    print(f"Error: {exc}", file=sys.stderr)
    hint = _hint_for(exc)
    if hint:
        print(f"  {hint}", file=sys.stderr)
    return _exit_code_for(exc)


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    """Build components, run one command handler, always close the store."""
    handler = _HANDLERS[args.command]
    components: dict[str, Any] = {}
    try:
        components = build_components(app_settings)
        return await handler(args, app_settings, components)
    except RagChatError as exc:
        return _report_error(exc)
    finally:
        if "vector_store" in components:
            await components["vector_store"].close()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ragchat CLI."""
    parser = argparse.ArgumentParser(
        prog="ragchat",
        description="Ingest text documents and ask questions about them.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- setup-db --
    setup_parser = subparsers.add_parser(
        "setup-db", help="Create the database tables if they are missing"
    )
    setup_parser.add_argument(
        "--check",
        action="store_true",
        help="Only report missing components; exit 1 if any are missing",
    )

    # -- add --
    add_parser = subparsers.add_parser("add", help="Ingest a UTF-8 text file")
    add_parser.add_argument("file", help="Path to the text file")

    # -- list --
    subparsers.add_parser("list", help="List stored documents")

    # -- delete --
    delete_parser = subparsers.add_parser(
        "delete", help="Delete a document by ID or exact name"
    )
    delete_parser.add_argument("identifier", help="Document ID or exact document name")
    delete_parser.add_argument(
        "--yes", "-y", action="store_true", help="Skip confirmation prompt"
    )

    # -- ask --
    ask_parser = subparsers.add_parser("ask", help="Answer one question")
    ask_parser.add_argument("question", nargs="+", help="The question to answer")
    ask_parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Minimum similarity for a section to be used (default: MATCH_THRESHOLD)",
    )
    ask_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of sections to use (default: MATCH_COUNT)",
    )
    ask_parser.add_argument(
        "--show-context",
        action="store_true",
        dest="show_context",
        help="Print the retrieved context before the answer",
    )

    # -- chat --
    subparsers.add_parser("chat", help="Interactive question loop")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses the subcommand, loads Settings from the environment / .env file,
    configures logging, and exits with the handler's status code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_ERROR)

    app_settings = Settings()
    configure_logging(
        log_level=app_settings.log_level,
        json_output=app_settings.app_env == "production",
    )

    exit_code = asyncio.run(_run(args, app_settings))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
