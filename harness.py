"""
Interactive harness for exercising habit-matrix without MCP integration.

Usage:
    python harness.py <VAULT_ROOT> [--exclude .git,.obsidian]

Runs a quick read-only smoke test, then drops you into a REPL where you can
call the index and handlers directly. Nothing is written unless you use the
mutating commands (done, count, move).
"""

import json
import sys
from pathlib import Path

# Add src/ to path so imports work
sys.path.insert(0, str(Path(__file__).parent / "src"))

from habit_matrix.api.handlers import (
    handle_habit_counter,
    handle_habit_list,
    handle_task_complete,
    handle_task_set_quadrant,
    handle_week_summary,
)
from habit_matrix.config import Settings
from habit_matrix.engine.matrix import group_by_quadrant
from habit_matrix.errors import ConfigError
from habit_matrix.service import Services, build_services
from habit_matrix.utils.formatting import strip_annotations


def smoke_test(services: Services) -> None:
    """Quick automated checks after the first scan."""
    records = services.index.scan()
    st = services.index.status()
    print("\n=== Smoke Test ===")
    print(f"  Vault root:     {services.settings.vault_root}")
    print(f"  Docs indexed:   {st['documents_indexed']}")
    print(f"  Tasks indexed:  {st['tasks_indexed']}")
    print(f"  Excluded notes: {st['excluded']}")

    groups = group_by_quadrant(records)
    print("\n  Matrix:")
    for quadrant, tasks in groups.items():
        print(f"    {quadrant.label:30s} {len(tasks)}")
        for t in tasks[:3]:
            print(f"      {t.ref}  {strip_annotations(t.content)}")

    habits = handle_habit_list(services, group="category")
    print(f"\n  Habits: {habits['count']}")
    for name, members in habits["groups"].items():
        print(f"    {name:10s} {len(members)}")

    counters = handle_habit_list(services, sort="progress", group="accumulated")["groups"]["accumulated"]
    print(f"\n  Counters (by progress): {len(counters)}")
    for t in counters[:5]:
        print(f"    {t['accumulated_count']:4d}  {strip_annotations(t['content'])}")

    print("\n=== Smoke Test Complete ===\n")


def _find(services: Services, ref: str):
    for record in services.index.scan():
        if record.ref == ref:
            return record
    return None


def repl(services: Services) -> None:
    """Simple REPL for interactive exploration."""
    print("Interactive mode. Type 'help' for commands, 'quit' to exit.\n")

    commands = {
        "help":    "Show this help",
        "status":  "Show index status",
        "tasks":   "List all indexed tasks",
        "habits":  "List habits. Usage: habits [sort=progress] [direction=asc] [group=category]",
        "find":    "Search task text. Usage: find <substring>",
        "done":    "Complete a task. Usage: done <path:line>",
        "count":   "Change a counter. Usage: count <path:line> <+1|-1|reset>",
        "move":    "Move to a quadrant. Usage: move <path:line> <urgent-important|important|urgent|neither>",
        "summary": "Print the week summary prompt",
        "quit":    "Exit",
    }

    while True:
        try:
            line = input("habit-matrix> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        parts = line.split()
        cmd = parts[0].lower()

        if cmd == "quit" or cmd == "exit":
            break

        elif cmd == "help":
            for k, v in commands.items():
                print(f"  {k:10s} {v}")

        elif cmd == "status":
            print(json.dumps(services.index.status(), indent=2, default=str))

        elif cmd == "tasks":
            records = services.index.scan()
            print(f"Found {len(records)} tasks:")
            for t in records:
                print(f"  [{t.quadrant.value:16s}] {t.ref:30s} {strip_annotations(t.content)}")

        elif cmd == "habits":
            kwargs = dict(arg.split("=", 1) for arg in parts[1:] if "=" in arg)
            print(json.dumps(handle_habit_list(services, **kwargs), indent=2, ensure_ascii=False))

        elif cmd == "find":
            if len(parts) < 2:
                print("Usage: find <substring>")
                continue
            needle = " ".join(parts[1:]).lower()
            matches = [t for t in services.index.scan() if needle in t.content.lower()]
            print(f"Found {len(matches)} matching tasks:")
            for t in matches:
                print(f"  {t.ref:30s} {t.content}")

        elif cmd in ("done", "count", "move"):
            if len(parts) < 2 or (cmd != "done" and len(parts) < 3):
                print(f"Usage: {commands[cmd].split('Usage: ')[1]}")
                continue
            record = _find(services, parts[1])
            if record is None:
                print(f"  Task '{parts[1]}' not found")
                continue
            ref = {"file_path": record.file, "line": record.line, "text": record.content}
            if cmd == "done":
                result = handle_task_complete(services, **ref)
            elif cmd == "count":
                result = handle_habit_counter(services, delta=parts[2], **ref)
            else:
                result = handle_task_set_quadrant(services, quadrant=parts[2], **ref)
            print(json.dumps(result, indent=2, ensure_ascii=False))

        elif cmd == "summary":
            print(handle_week_summary(services)["summary"])

        else:
            print(f"Unknown command: {cmd}. Type 'help' for available commands.")


def main():
    if len(sys.argv) < 2:
        print("Usage: python harness.py <VAULT_ROOT> [--exclude .git,.obsidian]")
        sys.exit(1)

    env = {"VAULT_ROOT": str(Path(sys.argv[1]).resolve()), "VIEWS_ENABLED": "false"}
    args = sys.argv[2:]
    if "--exclude" in args and args.index("--exclude") + 1 < len(args):
        env["EXCLUDE_DIRS"] = args[args.index("--exclude") + 1]

    try:
        settings = Settings.from_env(env)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Scanning: {settings.vault_root}")
    print(f"Exclude dirs: {settings.exclude_dirs}")

    services = build_services(settings)
    smoke_test(services)
    repl(services)

    print("Done.")


if __name__ == "__main__":
    main()
