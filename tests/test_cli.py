from rich.console import Console

from src.cli.threadline_cli import build_parser, run


async def _run(database, console: Console, *argv: str) -> int:
    return await run(build_parser().parse_args(list(argv)), database, console)


async def test_cli_seeds_and_renders_a_thread(database) -> None:
    console = Console(record=True, width=120)

    assert await _run(database, console, "create-user", "Alice") == 0
    assert await _run(database, console, "post", "1", "Root post") == 0
    assert await _run(database, console, "post", "1", "First reply", "--reply-to", "1") == 0
    assert await _run(database, console, "post", "1", "Nested reply", "--reply-to", "2") == 0
    assert await _run(database, console, "thread", "1") == 0

    output = console.export_text()
    assert "Created user 1" in output
    assert "#1" in output and "#2" in output and "#3" in output
    assert "Nested reply" in output


async def test_cli_lists_messages_in_range(database) -> None:
    console = Console(record=True, width=120)
    await _run(database, console, "create-user", "Bob")
    await _run(database, console, "post", "1", "dated")

    assert await _run(database, console, "messages", "1", "--start", "2000-01-01T00:00:00Z") == 0
    assert "dated" in console.export_text()


async def test_cli_reports_failures(database) -> None:
    console = Console(record=True, width=120)

    assert await _run(database, console, "post", "42", "orphan") == 1
    assert await _run(database, console, "thread", "42") == 1

    output = console.export_text()
    assert "User not found" in output
    assert "Message not found" in output
