"""MCP tools for task groups, dependency analysis and execution tracking."""

from mcp.types import ToolAnnotations

from aiya_todo_mcp.enums import ResponseFormat
from aiya_todo_mcp.errors import TodoError
from aiya_todo_mcp.models.inputs import (
    CheckMainTaskCompletionInput,
    CreateTaskGroupInput,
    GetExecutableTasksInput,
    GetTaskGroupStatusInput,
    GetTodoDependenciesInput,
    ResetTaskExecutionInput,
    UpdateExecutionStatusInput,
)
from aiya_todo_mcp.server import get_manager, mcp
from aiya_todo_mcp.utils.formatters import (
    _format_dependencies_markdown,
    _format_group_status_markdown,
    _format_todo_concise,
    _format_todos_concise,
    _to_json,
)


@mcp.tool(
    name="createTaskGroup",
    annotations=ToolAnnotations(
        title="Create Task Group",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def create_task_group(params: CreateTaskGroupInput) -> str:
    """
    Create a main task and its ordered subtasks in one all-or-nothing call.

    USE THIS WHEN:
    - Breaking a goal down into steps an agent will execute
    - The steps depend on each other (run tests before deploy, ...)

    DEPENDENCY INDICES:
    - 0 refers to the main task
    - k refers to the k-th subtask of this request (1-based), which must be listed earlier
    - If any subtask fails to be created, nothing from this call is kept

    Args:
        params: CreateTaskGroupInput with mainTask, subtasks and optional groupId

    Returns:
        Summary of the created group with todo IDs

    Examples:
        - Sequential: subtasks=[{title: "Test"}, {title: "Build", dependencies: [1]}]
        - Fan-in: subtasks=[{title: "A"}, {title: "B"}, {title: "Ship", dependencies: [1, 2]}]
    """
    try:
        group = await get_manager().create_task_group(params)
    except TodoError as e:
        return f"Error: {e}\nNo todos were created."

    lines = [
        f"Task group created successfully: {group.group_id}",
        f"Main task: {group.main_task.title} (ID: {group.main_task.id})",
        f"Subtasks ({len(group.subtasks)}):",
    ]
    for subtask in group.subtasks:
        deps = f" (depends on: {', '.join(subtask.dependencies)})" if subtask.dependencies else ""
        lines.append(f"  {subtask.execution_order}. {subtask.title} (ID: {subtask.id}){deps}")
    return "\n".join(lines)


@mcp.tool(
    name="getExecutableTasks",
    annotations=ToolAnnotations(
        title="Executable Tasks",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def get_executable_tasks(params: GetExecutableTasksInput) -> str:
    """
    List todos that can be executed now: open, not running, all dependencies done.

    USE THIS WHEN:
    - Answering "what should the executor pick up next?"
    - Driving a task group step by step

    Args:
        params: GetExecutableTasksInput with optional groupId, limit and format

    Returns:
        Ready todos sorted by execution order
    """
    todos = get_manager().get_executable_tasks(params.group_id, params.limit)

    if params.response_format == ResponseFormat.JSON:
        return _to_json({"count": len(todos), "tasks": todos})

    if params.response_format == ResponseFormat.CONCISE:
        return _format_todos_concise(todos, "executable")

    if not todos:
        return "# Executable Tasks\n\nNo tasks are ready for execution."

    lines = [f"# Executable Tasks ({len(todos)})", ""]
    lines.append("| Order | ID | Task | Tools |")
    lines.append("|-------|----|------|-------|")
    for todo in todos:
        order = "-" if todo.execution_order is None else str(todo.execution_order)
        tools = "-"
        if todo.execution_config is not None and todo.execution_config.tools_required:
            tools = ", ".join(todo.execution_config.tools_required)
        lines.append(f"| {order} | {todo.id} | {todo.title[:40]} | {tools} |")
    return "\n".join(lines)


@mcp.tool(
    name="updateExecutionStatus",
    annotations=ToolAnnotations(
        title="Update Execution Status",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def update_execution_status(params: UpdateExecutionStatusInput) -> str:
    """
    Report an execution state change for a todo.

    ALLOWED TRANSITIONS:
    - pending → ready, running
    - ready → running, pending
    - running → completed, failed, pending
    - failed → pending (retry)
    - completed is final

    Completing the last open subtask of a group also completes the group's main task.

    Args:
        params: UpdateExecutionStatusInput containing todoId, state and optional error

    Returns:
        Description of the state change, or why it was rejected
    """
    try:
        result = await get_manager().update_execution_status(params.todo_id, params.state, params.error)
    except TodoError as e:
        return f"Error: {e}"

    if not result.success:
        return f"Error: {result.message}"

    lines = [result.message, _format_todo_concise(result.updated_todo)]
    completion = result.main_task_completion
    if completion is not None and completion.main_task_completed and completion.main_task is not None:
        lines.append(f"Main task completed: {completion.main_task.title} (ID: {completion.main_task.id})")
    return "\n".join(lines)


@mcp.tool(
    name="getTaskGroupStatus",
    annotations=ToolAnnotations(
        title="Task Group Status",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def get_task_group_status(params: GetTaskGroupStatusInput) -> str:
    """
    Show progress of a task group: main task, per-state counts and every todo.

    Args:
        params: GetTaskGroupStatusInput containing groupId and format

    Returns:
        Group status report
    """
    try:
        status = get_manager().get_task_group_status(params.group_id)
    except TodoError as e:
        return f"Error: {e}"

    if params.response_format == ResponseFormat.JSON:
        return _to_json(status)
    if params.response_format == ResponseFormat.CONCISE:
        stats = status.stats
        return _format_todos_concise(status.tasks, f"{status.group_id} {stats.completed}/{stats.total} completed")
    return _format_group_status_markdown(status)


@mcp.tool(
    name="resetTaskExecution",
    annotations=ToolAnnotations(
        title="Reset Task Execution",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def reset_task_execution(params: ResetTaskExecutionInput) -> str:
    """
    Reset a failed todo to pending with a fresh attempt count.

    With resetDependents, completed or failed todos that depend on it are reopened too.

    Args:
        params: ResetTaskExecutionInput containing todoId and resetDependents

    Returns:
        List of reset todos
    """
    try:
        reset = await get_manager().reset_task_execution(params.todo_id, params.reset_dependents)
    except TodoError as e:
        return f"Error: {e}"
    return _format_todos_concise(reset, "reset to pending")


@mcp.tool(
    name="checkMainTaskCompletion",
    annotations=ToolAnnotations(
        title="Check Main Task Completion",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def check_main_task_completion(params: CheckMainTaskCompletionInput) -> str:
    """
    Complete a group's main task if every subtask is done.

    Args:
        params: CheckMainTaskCompletionInput containing groupId

    Returns:
        Whether the main task is completed and why
    """
    try:
        completion = await get_manager().check_and_complete_main_task(params.group_id)
    except TodoError as e:
        return f"Error: {e}"

    status = "completed" if completion.main_task_completed else "not completed"
    lines = [f"Main task {status}: {completion.message}"]
    if completion.main_task is not None:
        lines.append(_format_todo_concise(completion.main_task))
    return "\n".join(lines)


@mcp.tool(
    name="getTodoDependencies",
    annotations=ToolAnnotations(
        title="Todo Dependencies",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def get_todo_dependencies(params: GetTodoDependenciesInput) -> str:
    """
    Show what a todo waits on, what waits on it, and whether it is ready.

    Args:
        params: GetTodoDependenciesInput containing todoId and format

    Returns:
        Dependency report
    """
    try:
        info = get_manager().get_todo_dependencies(params.todo_id)
    except TodoError as e:
        return f"Error: {e}"

    if params.response_format == ResponseFormat.JSON:
        return _to_json(info)
    if params.response_format == ResponseFormat.CONCISE:
        blocked_by = ",".join(t.id for t in info.blocked_by) or "-"
        blocks = ",".join(t.id for t in info.blocks) or "-"
        state = "ready" if info.ready else "blocked"
        return f"{info.todo.id}: {state} | blocked_by:{blocked_by} | blocks:{blocks}"
    return _format_dependencies_markdown(info)
