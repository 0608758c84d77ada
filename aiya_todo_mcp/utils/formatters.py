"""Formatting utilities for todo output."""

import json
from typing import Any

from pydantic import BaseModel

from aiya_todo_mcp.enums import ExecutionState
from aiya_todo_mcp.models.results import GroupExecutionStats, TaskGroupStatus, TodoDependencies
from aiya_todo_mcp.models.task import Todo

_STATE_ICONS = {
    ExecutionState.PENDING: "⏳",
    ExecutionState.READY: "🟢",
    ExecutionState.RUNNING: "▶️",
    ExecutionState.COMPLETED: "✅",
    ExecutionState.FAILED: "❌",
}


def _to_json(payload: Any) -> str:
    """Serialize models (camelCase, absent fields omitted) or plain data as JSON."""

    def dump(value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json", by_alias=True, exclude_none=True)
        if isinstance(value, list):
            return [dump(v) for v in value]
        if isinstance(value, dict):
            return {k: dump(v) for k, v in value.items()}
        return value

    return json.dumps(dump(payload), indent=2, ensure_ascii=False)


def _checkbox(todo: Todo) -> str:
    return "[✓]" if todo.completed else "[ ]"


def _format_todo_concise(todo: Todo) -> str:
    """
    Format a single todo in concise format for token efficiency.

    Output: "[ ] 5: Deploy to staging (running, order:3, deps:2,4)"
    """
    meta = []
    if todo.execution_status is not None:
        meta.append(todo.execution_state.value)
    if todo.execution_order is not None:
        meta.append(f"order:{todo.execution_order}")
    if todo.dependencies:
        meta.append(f"deps:{','.join(todo.dependencies)}")

    line = f"{_checkbox(todo)} {todo.id}: {todo.title}"
    if meta:
        return f"{line} ({', '.join(meta)})"
    return line


def _format_todos_concise(todos: list[Todo], title: str | None = None) -> str:
    """
    Format a list of todos in concise format.

    Output:
    2 todo(s) | ready
    [ ] 1: First (pending)
    [ ] 2: Second
    """
    if not todos:
        return "0 todos"

    header = f"{len(todos)} todo(s)"
    if title:
        header = f"{len(todos)} todo(s) | {title}"

    return "\n".join([header] + [_format_todo_concise(t) for t in todos])


def _format_todo_markdown(todo: Todo) -> str:
    """Format a single todo as markdown."""
    lines = [f"### {_checkbox(todo)} [{todo.id}] {todo.title}"]

    details = [f"**Created**: {todo.created_at.isoformat()}"]
    if todo.group_id:
        details.append(f"**Group**: {todo.group_id}")
    if todo.execution_order is not None:
        details.append(f"**Order**: {todo.execution_order}")
    if todo.tags:
        details.append(f"**Tags**: {', '.join(todo.tags)}")
    lines.append(" | ".join(details))

    if todo.description:
        lines.append(todo.description)

    if todo.dependencies:
        lines.append(f"**Depends on**: {', '.join(todo.dependencies)}")

    if todo.execution_status is not None:
        status = todo.execution_status
        state = f"{_STATE_ICONS[status.state]} {status.state.value}"
        if status.attempts:
            state += f" (attempts: {status.attempts})"
        lines.append(f"**Execution**: {state}")
        if status.last_error:
            lines.append(f"**Last error**: {status.last_error}")

    if todo.execution_config is not None and todo.execution_config.tools_required:
        lines.append(f"**Tools**: {', '.join(todo.execution_config.tools_required)}")

    if todo.verification_method:
        verification = todo.verification_status.value if todo.verification_status else "not started"
        lines.append(f"**Verification**: {todo.verification_method} ({verification})")
        if todo.verification_notes:
            lines.append(f"  - {todo.verification_notes}")

    return "\n".join(lines)


def _format_todos_markdown(todos: list[Todo], title: str = "Todos") -> str:
    """Format a list of todos as markdown."""
    if not todos:
        return f"# {title}\n\nNo todos found."

    lines = [f"# {title}", f"*{len(todos)} todo(s)*", ""]

    for todo in todos:
        lines.append(_format_todo_markdown(todo))
        lines.append("")

    return "\n".join(lines)


def _format_stats(stats: GroupExecutionStats) -> str:
    return (
        f"{stats.completed}/{stats.total} completed | {stats.running} running | {stats.ready} ready | "
        f"{stats.pending} pending | {stats.failed} failed"
    )


def _format_group_status_markdown(status: TaskGroupStatus) -> str:
    """Format a task group status report as a markdown table."""
    lines = [f"# Task Group {status.group_id}", ""]

    if status.main_task is not None:
        lines.append(f"**Main task**: [{status.main_task.id}] {status.main_task.title}")
    else:
        lines.append("**Main task**: (none)")
    lines.append(f"**Progress**: {_format_stats(status.stats)}")
    lines.append("")

    lines.append("| Order | ID | Task | State | Depends on |")
    lines.append("|-------|----|------|-------|------------|")
    for todo in status.tasks:
        order = "-" if todo.execution_order is None else str(todo.execution_order)
        state = ExecutionState.COMPLETED if todo.completed else todo.execution_state
        deps = ", ".join(todo.dependencies) if todo.dependencies else "-"
        lines.append(f"| {order} | {todo.id} | {todo.title[:40]} | {_STATE_ICONS[state]} {state.value} | {deps} |")

    return "\n".join(lines)


def _format_dependencies_markdown(info: TodoDependencies) -> str:
    """Format the dependency neighbourhood of a todo."""
    lines = [f"# Dependencies for [{info.todo.id}] {info.todo.title}", ""]

    lines.append(f"### ⬆️ Blocked By ({len(info.blocked_by)} todo(s) required)")
    if info.blocked_by or info.missing:
        for dep in info.blocked_by:
            done = " ✓ COMPLETED" if dep.is_done else ""
            lines.append(f"└── [{dep.id}] {dep.title}{done}")
        for dep_id in info.missing:
            lines.append(f"└── [{dep_id}] (missing)")
    else:
        lines.append("(None)")
    lines.append("")

    lines.append(f"### ⬇️ Blocks ({len(info.blocks)} todo(s) waiting)")
    if info.blocks:
        for dependent in info.blocks:
            lines.append(f"├── [{dependent.id}] {dependent.title}")
    else:
        lines.append("(None)")
    lines.append("")

    lines.append("### Assessment")
    lines.append(f"- Status: {'READY' if info.ready else 'BLOCKED'}")
    return "\n".join(lines)
