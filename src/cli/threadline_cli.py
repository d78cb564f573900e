"""
Command-line interface for inspecting and seeding a Threadline database.

Runs the same dispatch actions the GraphQL API uses, directly against
the configured database.

Usage:
    python -m src.cli.threadline_cli init-db
    python -m src.cli.threadline_cli create-user "Alice"
    python -m src.cli.threadline_cli post 1 "Hello" --reply-to 4
    python -m src.cli.threadline_cli messages 1 --start 2024-01-01T00:00:00Z
    python -m src.cli.threadline_cli thread 4
    python -m src.cli.threadline_cli --help
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from ..db.models import MessageModel
from ..db.repositories import MessageRepository
from ..db.session import Database
from ..services.actions import (
    ActionResult,
    MessageAction,
    UserAction,
    handle_message_action,
    handle_user_action,
)

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str) -> datetime:
    """argparse type: ISO-8601 string to naive UTC."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 datetime: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def messages_table(messages: Sequence[MessageModel], title: str) -> Table:
    """Tabulate messages for display."""
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Reply to", justify="right")
    table.add_column("Created (UTC)")
    table.add_column("Content")
    for message in messages:
        table.add_row(
            str(message.id),
            str(message.parent_id) if message.parent_id is not None else "",
            message.created_at.isoformat(timespec="seconds"),
            message.content,
        )
    return table


def thread_tree(root: MessageModel, replies_by_parent: Dict[int, List[MessageModel]]) -> Tree:
    """Render a message and all of its descendants as a tree."""
    def label(message: MessageModel) -> str:
        return f"[bold]#{message.id}[/bold] user {message.user_id}: {message.content}"

    tree = Tree(label(root))
    pending = [(root, tree)]
    while pending:
        message, node = pending.pop()
        for reply in replies_by_parent.get(message.id, []):
            pending.append((reply, node.add(label(reply))))
    return tree


async def load_thread(repo: MessageRepository, root_id: int) -> Dict[int, List[MessageModel]]:
    """Breadth-first fetch of every reply below ``root_id``, grouped by parent."""
    replies_by_parent: Dict[int, List[MessageModel]] = {}
    frontier = [root_id]
    while frontier:
        replies = await repo.list_replies(frontier)
        frontier = []
        for reply in replies:
            replies_by_parent.setdefault(reply.parent_id, []).append(reply)
            frontier.append(reply.id)
    return replies_by_parent


def _report(console: Console, result: ActionResult, success_text: str) -> int:
    if not result.ok:
        console.print(f"[bold red]❌ {result.error}[/bold red]")
        return 1
    console.print(f"[green]✅ {success_text}[/green]")
    return 0


async def run(args: argparse.Namespace, database: Database, console: Console) -> int:
    """
    Execute one CLI command.

    Args:
        args: Parsed command-line arguments
        database: Initialized database manager
        console: Rich console for output

    Returns:
        Process exit code
    """
    if args.command == "init-db":
        await database.create_tables()
        console.print("[green]✅ Tables created[/green]")
        return 0

    async with database.session() as session:
        if args.command == "create-user":
            result = await handle_user_action(session, UserAction.create(args.name))
            return _report(console, result, f"Created user {result.affected_id}")

        if args.command == "users":
            result = await handle_user_action(
                session, UserAction.list(limit=args.limit, offset=args.offset)
            )
            table = Table(title="Users")
            table.add_column("ID", justify="right")
            table.add_column("Name")
            for user in result.users:
                table.add_row(str(user.id), user.name)
            console.print(table)
            return 0

        if args.command == "post":
            action = MessageAction.create(args.user_id, args.content, parent_id=args.reply_to)
            result = await handle_message_action(session, action)
            return _report(console, result, f"Created message {result.affected_id}")

        if args.command == "messages":
            if args.start is not None or args.end is not None:
                action = MessageAction.in_time_range(
                    args.user_id,
                    args.start or datetime.min,
                    args.end or datetime.max,
                )
            else:
                action = MessageAction.for_user(args.user_id)
            result = await handle_message_action(session, action)
            if not result.ok:
                return _report(console, result, "")
            console.print(messages_table(result.messages, f"Messages for user {args.user_id}"))
            return 0

        if args.command == "thread":
            result = await handle_message_action(session, MessageAction.get(args.message_id))
            if not result.ok:
                return _report(console, result, "")
            replies = await load_thread(MessageRepository(session), result.message.id)
            console.print(thread_tree(result.message, replies))
            return 0

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect and seed a Threadline database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create tables directly from the ORM models (development only)
  python -m src.cli.threadline_cli init-db

  # Create a user, then post a message and a reply
  python -m src.cli.threadline_cli create-user "Alice"
  python -m src.cli.threadline_cli post 1 "Hello"
  python -m src.cli.threadline_cli post 1 "Replying to myself" --reply-to 1

  # Show a reply thread
  python -m src.cli.threadline_cli thread 1
        """
    )

    parser.add_argument(
        "--database-url",
        type=str,
        help="Async SQLAlchemy URL (defaults to DATABASE_URL / DB_* settings)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create all tables")

    create_user = commands.add_parser("create-user", help="Create a user")
    create_user.add_argument("name", type=str)

    users = commands.add_parser("users", help="List users")
    users.add_argument("--limit", type=int, default=20)
    users.add_argument("--offset", type=int, default=0)

    post = commands.add_parser("post", help="Create a message")
    post.add_argument("user_id", type=int)
    post.add_argument("content", type=str)
    post.add_argument("--reply-to", type=int, default=None, help="Parent message ID")

    messages = commands.add_parser("messages", help="List a user's messages")
    messages.add_argument("user_id", type=int)
    messages.add_argument("--start", type=_parse_timestamp, default=None)
    messages.add_argument("--end", type=_parse_timestamp, default=None)

    thread = commands.add_parser("thread", help="Show a message and its replies")
    thread.add_argument("message_id", type=int)

    return parser


async def _main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console = Console()
    database = Database(args.database_url)
    await database.initialize()
    try:
        return await run(args, database, console)
    except Exception as e:
        console.print(f"\n[bold red]❌ Command failed: {e}[/bold red]")
        logger.error("CLI command failed", exc_info=True)
        return 1
    finally:
        await database.close()


def main():
    """Main CLI entry point"""
    sys.exit(asyncio.run(_main()))


if __name__ == "__main__":
    main()
