# src/taskboard/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable
from typing import Any, cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.date_utils import describe_date, format_date, format_relative, parse_datetime
from ..tasks.task_models import ALL, MutationOutcome, Subtask, SubtaskStatus, Task, TaskStatus

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Arguments are shell-split, so quoted values keep their spaces.
        Input errors (ValueError) are returned as a message, not raised.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return await h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return await h2(state, args)
        except ValueError as exc:
            return f"Error: {exc}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _split_options(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Separate positional words from key=value options."""
    words: list[str] = []
    opts: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key and key.isidentifier():
            opts[key.lower()] = value
        else:
            words.append(arg)
    return words, opts


def _parse_date_opt(value: str) -> Any:
    if value.strip().lower() in ("", "none", "-"):
        return None
    dt = parse_datetime(value)
    if dt is None:
        raise ValueError("Dates must be ISO formatted, e.g. 2024-05-01 or 2024-05-01T15:30:00")
    return dt


def _resolve_category_opt(state: AppState, value: str) -> str:
    if value.strip().lower() in ("", "none", "-"):
        return ""
    cat = task_api.resolve_category(state, value)
    if cat is None:
        raise ValueError(f"Unknown category '{value}'. Use /cat list.")
    return cat.id


def _task_fields_from_opts(state: AppState, opts: dict[str, str]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key, value in opts.items():
        if key in ("desc", "description"):
            fields["description"] = value
        elif key in ("priority", "prio", "p"):
            fields["priority"] = task_api.parse_priority(value)
        elif key == "due":
            fields["due_date"] = _parse_date_opt(value)
        elif key in ("remind", "reminder"):
            fields["reminder_time"] = _parse_date_opt(value)
        elif key in ("cat", "category"):
            fields["category"] = _resolve_category_opt(state, value)
        elif key in ("tags", "tag"):
            fields["tags"] = value
        elif key == "title":
            fields["title"] = value
        else:
            raise ValueError(f"Unknown option '{key}='")
    return fields


def _require_task(state: AppState, ref: str | None) -> Task:
    if not ref:
        raise ValueError("Task id is required")
    task = task_api.resolve_task(state, ref)
    if task is None:
        raise ValueError(f"Task '{ref}' not found (use an id or a unique id prefix)")
    return task


def _require_subtask(task: Task, ref: str | None) -> Subtask:
    if not ref:
        raise ValueError("Subtask id or number is required")
    if ref.isdigit() and 1 <= int(ref) <= len(task.subtasks):
        return task.subtasks[int(ref) - 1]
    hits = [s for s in task.subtasks if s.id.startswith(ref)]
    if len(hits) != 1:
        raise ValueError(f"Subtask '{ref}' not found in task {task.id[:8]}")
    return hits[0]


def _outcome_suffix(outcome: MutationOutcome) -> str:
    if outcome == MutationOutcome.SYNC_FAILED:
        return " (saved locally; cloud sync failed)"
    if outcome == MutationOutcome.PERSIST_FAILED:
        return " (warning: could not write local storage)"
    return ""


# ---- rendering ----

_STATUS_MARK = {
    TaskStatus.TODO: "[ ]",
    TaskStatus.IN_PROGRESS: "[~]",
    TaskStatus.DONE: "[x]",
}


def _category_name(state: AppState, category_id: str) -> str:
    for cat in state.categories:
        if cat.id == category_id:
            return cat.name
    return category_id


def _task_line(state: AppState, task: Task) -> str:
    parts = [f"{_STATUS_MARK[task.status]} {task.id[:8]}  {task.title}", f"({task.priority.value})"]
    if task.due_date:
        parts.append(f"due {describe_date(task.due_date)}")
    if task.category:
        parts.append(f"@{_category_name(state, task.category)}")
    if task.tags:
        parts.append(" ".join(f"#{t}" for t in task.tags))
    if task.subtasks:
        done = sum(1 for s in task.subtasks if s.status == SubtaskStatus.DONE)
        parts.append(f"[{done}/{len(task.subtasks)}]")
    return " ".join(parts)


def _task_details(state: AppState, task: Task) -> str:
    lines = [
        f"Task {task.id}",
        f"  Title: {task.title}",
        f"  Status: {task.status.value}",
        f"  Priority: {task.priority.value}",
    ]
    if task.description:
        lines.append(f"  Description: {task.description}")
    if task.category:
        lines.append(f"  Category: {_category_name(state, task.category)}")
    if task.tags:
        lines.append(f"  Tags: {', '.join(task.tags)}")
    if task.due_date:
        lines.append(f"  Due: {format_date(task.due_date)} ({describe_date(task.due_date)})")
    if task.reminder_time:
        flag = "sent" if task.reminded else "pending"
        lines.append(f"  Reminder: {format_date(task.reminder_time)} ({flag})")
    lines.append(f"  Updated: {format_relative(task.updated_at)}")
    for i, sub in enumerate(task.subtasks, start=1):
        mark = "[x]" if sub.status == SubtaskStatus.DONE else "[ ]"
        lines.append(f"    {i}. {mark} {sub.title}")
    return "\n".join(lines)


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_add(state: AppState, args: list[str]) -> str:
    words, opts = _split_options(args)
    fields = _task_fields_from_opts(state, opts)
    fields.setdefault("title", " ".join(words))
    task = await task_api.add_task(state, fields)
    return f"Created task {task.id[:8]}: {task.title}{_outcome_suffix(state.last_outcome)}"


async def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.filtered
    if not tasks:
        return "No tasks found with the current filters."
    header = f"Tasks ({len(tasks)} of {len(state.tasks)}):"
    return "\n".join([header, *(_task_line(state, t) for t in tasks)])


async def cmd_show(state: AppState, args: list[str]) -> str:
    task = _require_task(state, args[0] if args else None)
    return _task_details(state, task)


async def cmd_edit(state: AppState, args: list[str]) -> str:
    words, opts = _split_options(args)
    task = _require_task(state, words[0] if words else None)
    if not opts:
        return "Usage: /edit <id> title=... desc=... priority=... due=... remind=... cat=... tags=a,b"
    patch = _task_fields_from_opts(state, opts)
    if "reminder_time" in patch:
        # A new reminder time should fire again.
        patch["reminded"] = False
    outcome = await task_api.update_task(state, task.id, patch)
    return f"Updated task {task.id[:8]}{_outcome_suffix(outcome)}"


async def cmd_status(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /status <id> todo|in-progress|done"
    task = _require_task(state, args[0])
    status = task_api.parse_status(args[1])
    outcome = await task_api.set_task_status(state, task.id, status)
    return f"Task {task.id[:8]} -> {status.value}{_outcome_suffix(outcome)}"


async def cmd_done(state: AppState, args: list[str]) -> str:
    task = _require_task(state, args[0] if args else None)
    outcome = await task_api.set_task_status(state, task.id, TaskStatus.DONE)
    return f"Task {task.id[:8]} -> done{_outcome_suffix(outcome)}"


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <id> [<id> ...]"
    tasks = [_require_task(state, ref) for ref in args]
    if len(tasks) == 1:
        outcome = await task_api.delete_task(state, tasks[0].id)
    else:
        outcome = await task_api.batch_delete_tasks(state, [t.id for t in tasks])
    return f"Deleted {len(tasks)} task(s){_outcome_suffix(outcome)}"


async def cmd_sub(state: AppState, args: list[str]) -> str:
    """
    /sub add <id> <title>        -> add subtask
    /sub done <id> <n>           -> mark subtask done
    /sub undo <id> <n>           -> mark subtask todo
    /sub edit <id> <n> <title>   -> rename subtask
    /sub rm <id> <n>             -> delete subtask
    """
    usage = "Usage: /sub add|done|undo|edit|rm <task-id> [<n>] [title]"
    if len(args) < 2:
        return usage

    sub_cmd = args[0].lower()
    task = _require_task(state, args[1])

    if sub_cmd == "add":
        outcome = await task_api.add_subtask(state, task.id, " ".join(args[2:]))
        return f"Subtask added to {task.id[:8]}{_outcome_suffix(outcome)}"

    sub = _require_subtask(task, args[2] if len(args) > 2 else None)

    if sub_cmd in ("done", "undo"):
        status = SubtaskStatus.DONE if sub_cmd == "done" else SubtaskStatus.TODO
        outcome = await task_api.set_subtask_status(state, task.id, sub.id, status)
        return f"Subtask '{sub.title}' -> {status.value}{_outcome_suffix(outcome)}"

    if sub_cmd == "edit":
        outcome = await task_api.update_subtask(
            state, task.id, sub.id, {"title": " ".join(args[3:])}
        )
        return f"Subtask renamed{_outcome_suffix(outcome)}"

    if sub_cmd == "rm":
        outcome = await task_api.delete_subtask(state, task.id, sub.id)
        return f"Subtask '{sub.title}' deleted{_outcome_suffix(outcome)}"

    return usage


async def cmd_cat(state: AppState, args: list[str]) -> str:
    """
    /cat                           -> list categories
    /cat add <name> [color=#hex]   -> add category
    /cat edit <ref> name=.. color=..
    /cat rm <ref>                  -> delete (tasks keep existing, category cleared)
    """
    sub_cmd = args[0].lower() if args else "list"
    words, opts = _split_options(args[1:])

    if sub_cmd == "list":
        if not state.categories:
            return "No categories."
        counts = state.statistics.category_stats
        lines = ["Categories:"]
        for cat in state.categories:
            lines.append(f"  {cat.id[:8]}  {cat.name} {cat.color} ({counts.get(cat.id, 0)} tasks)")
        return "\n".join(lines)

    if sub_cmd == "add":
        cat = await task_api.add_category(
            state, {"name": " ".join(words), "color": opts.get("color")}
        )
        return f"Created category {cat.name} ({cat.id[:8]}){_outcome_suffix(state.last_outcome)}"

    if sub_cmd in ("edit", "rm"):
        ref = " ".join(words)
        cat = task_api.resolve_category(state, ref)
        if cat is None:
            return f"Unknown category '{ref}'."
        if sub_cmd == "rm":
            outcome = await task_api.delete_category(state, cat.id)
            return f"Deleted category {cat.name}{_outcome_suffix(outcome)}"
        patch = {k: v for k, v in opts.items() if k in ("name", "color")}
        if not patch:
            return "Usage: /cat edit <ref> name=... color=..."
        outcome = await task_api.update_category(state, cat.id, patch)
        return f"Updated category {cat.name}{_outcome_suffix(outcome)}"

    return "Usage: /cat list | add <name> [color=..] | edit <ref> name=.. color=.. | rm <ref>"


def _describe_filters(state: AppState) -> str:
    f = state.filters
    status = f.status if f.status == ALL else f.status.value
    prio = ", ".join(p.value for p in f.priority) or "any"
    cats = ", ".join(_category_name(state, c) for c in f.category) or "any"
    search = f.search or "-"
    return f"Filters: status={status} priority={prio} category={cats} search={search}"


async def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter                          -> show current filters
    /filter status <s|all>
    /filter priority <p,p|none>
    /filter category <ref,ref|none>
    /filter search <text>            (empty clears)
    /filter reset
    """
    if not args or args[0].lower() == "show":
        return _describe_filters(state)

    sub_cmd = args[0].lower()
    rest = args[1:]

    if sub_cmd == "reset":
        task_api.reset_filters(state)
    elif sub_cmd == "status":
        task_api.update_filters(state, {"status": rest[0].lower() if rest else ALL})
    elif sub_cmd == "priority":
        raw = ",".join(rest)
        task_api.update_filters(state, {"priority": [] if raw in ("", "none") else raw})
    elif sub_cmd == "category":
        raw = ",".join(rest)
        ids = [] if raw in ("", "none") else [
            _resolve_category_opt(state, r) for r in raw.split(",") if r.strip()
        ]
        task_api.update_filters(state, {"category": ids})
    elif sub_cmd == "search":
        task_api.update_filters(state, {"search": " ".join(rest)})
    else:
        return "Usage: /filter [show|reset|status <s>|priority <p,..>|category <c,..>|search <text>]"

    return f"{_describe_filters(state)}\n{len(state.filtered)} task(s) match."


async def cmd_stats(state: AppState, args: list[str]) -> str:
    s = state.statistics
    prio = ", ".join(f"{k}={v}" for k, v in s.priority_stats.items())
    lines = [
        "Statistics:",
        f"  Total: {s.total}",
        f"  Todo: {s.todo}  In progress: {s.in_progress}  Done: {s.done}",
        f"  Completion: {s.completion_rate}%",
        f"  Priority: {prio}",
    ]
    if s.category_stats:
        cats = ", ".join(
            f"{_category_name(state, cid)}={n}" for cid, n in s.category_stats.items()
        )
        lines.append(f"  Categories: {cats}")
    return "\n".join(lines)


async def cmd_sync(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /sync          -> show status
    /sync on|off   -> toggle cloud sync
    /sync pull     -> reload from cloud (remote replaces local if non-empty)
    """
    remote = "configured" if state.store.remote_available() else "not configured"
    if not args or args[0].lower() == "status":
        return f"Cloud sync is {'ON' if state.sync_enabled else 'OFF'} (remote {remote})."

    arg = args[0].lower()

    if arg in ("on", "1", "true", "yes"):
        task_api.set_sync_enabled(state, True)
        suffix = "" if state.store.remote_available() else " Warning: remote store is not configured."
        return f"Cloud sync enabled.{suffix}"

    if arg in ("off", "0", "false", "no"):
        task_api.set_sync_enabled(state, False)
        return "Cloud sync disabled. Data stays local."

    if arg == "pull":
        if emit:
            with contextlib.suppress(Exception):
                emit("[SYNC] Loading data...")
        await task_api.load_initial_data(state)
        return f"Loaded {len(state.tasks)} tasks and {len(state.categories)} categories."

    return "Usage: /sync on | /sync off | /sync pull"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> [desc=..] [priority=high|medium|low] "
    "[due=ISO] [remind=ISO] [cat=..] [tags=a,b].",
)
registry.register("list", cmd_list, help_text="List tasks matching the current filters.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show task details: /show <id>.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> key=value ...")
registry.register("status", cmd_status, help_text="Set status: /status <id> todo|in-progress|done.")
registry.register("done", cmd_done, help_text="Mark a task done: /done <id>.")
registry.register("rm", cmd_rm, help_text="Delete task(s): /rm <id> [<id> ...].", aliases=["del"])
registry.register("sub", cmd_sub, help_text="Subtasks: /sub add|done|undo|edit|rm <id> ...")
registry.register("cat", cmd_cat, help_text="Categories: /cat list|add|edit|rm.")
registry.register("filter", cmd_filter, help_text="Filters: /filter status|priority|category|search|reset.")
registry.register("stats", cmd_stats, help_text="Show task statistics.")
registry.register("sync", cmd_sync, help_text="Cloud sync: /sync on | off | pull.")
