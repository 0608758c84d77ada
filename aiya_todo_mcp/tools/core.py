"""Core MCP tool definitions: todo CRUD and verification."""

from mcp.types import ToolAnnotations

from aiya_todo_mcp.enums import ResponseFormat
from aiya_todo_mcp.errors import TodoError
from aiya_todo_mcp.models.inputs import (
    CreateTodoInput,
    DeleteTodoInput,
    GetTodoInput,
    GetTodosNeedingVerificationInput,
    ListTodosInput,
    SetVerificationMethodInput,
    UpdateTodoInput,
    UpdateVerificationStatusInput,
)
from aiya_todo_mcp.models.task import Todo
from aiya_todo_mcp.server import get_manager, mcp
from aiya_todo_mcp.utils.formatters import (
    _format_todo_concise,
    _format_todo_markdown,
    _format_todos_concise,
    _format_todos_markdown,
    _to_json,
)


def _render_todos(todos: list[Todo], response_format: ResponseFormat, title: str) -> str:
    if response_format == ResponseFormat.JSON:
        return _to_json({"count": len(todos), "todos": todos})
    if response_format == ResponseFormat.CONCISE:
        return _format_todos_concise(todos, title)
    return _format_todos_markdown(todos, title)


@mcp.tool(
    name="createTodo",
    annotations=ToolAnnotations(
        title="Create Todo",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def create_todo(params: CreateTodoInput) -> str:
    """
    Create a new todo item.

    USE THIS WHEN:
    - Adding a single todo to track
    - Adding a todo that waits on existing todos (dependencies)

    DO NOT USE WHEN:
    - Creating a main task with ordered subtasks → use createTaskGroup instead
    - Changing an existing todo → use updateTodo instead

    Args:
        params: CreateTodoInput containing the title and optional attributes

    Returns:
        Confirmation message with the new todo ID

    Examples:
        - Simple todo: params with title="Buy groceries"
        - With dependencies: params with title="Deploy", dependencies=["3", "4"]
        - Grouped: params with title="Write docs", groupId="release-1", executionOrder=2
    """
    try:
        todo = await get_manager().create_todo(params)
    except TodoError as e:
        return f"Error: {e}"
    return f'Todo created successfully: "{todo.title}" (ID: {todo.id})'


@mcp.tool(
    name="listTodos",
    annotations=ToolAnnotations(
        title="List Todos",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def list_todos(params: ListTodosInput) -> str:
    """
    List all todo items with optional filtering.

    Args:
        params: ListTodosInput with optional completed and groupId filters

    Returns:
        Formatted list of todos (markdown, JSON or concise)

    Examples:
        - All todos: params with default values
        - Open todos: params with completed=false
        - One group as JSON: params with groupId="release-1", response_format="json"
    """
    todos = get_manager().list_todos(completed=params.completed, group_id=params.group_id)

    title = "Todos"
    if params.completed is not None:
        title = "Completed Todos" if params.completed else "Open Todos"
    if params.group_id:
        title += f" in group '{params.group_id}'"

    return _render_todos(todos, params.response_format, title)


@mcp.tool(
    name="getTodo",
    annotations=ToolAnnotations(
        title="Get Todo",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def get_todo(params: GetTodoInput) -> str:
    """
    Get a specific todo item by ID.

    Args:
        params: GetTodoInput containing the id and response_format

    Returns:
        Detailed todo information (markdown, JSON or concise)
    """
    todo = get_manager().get_todo(params.id)
    if todo is None:
        return f"Error: Todo with ID {params.id} not found.\nTip: Use listTodos to find valid todo IDs."

    if params.response_format == ResponseFormat.JSON:
        return _to_json(todo)
    if params.response_format == ResponseFormat.CONCISE:
        return _format_todo_concise(todo)
    return _format_todo_markdown(todo)


@mcp.tool(
    name="updateTodo",
    annotations=ToolAnnotations(
        title="Update Todo",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def update_todo(params: UpdateTodoInput) -> str:
    """
    Update a todo item. Only the fields provided are changed.

    DO NOT USE WHEN:
    - Reporting execution progress → use updateExecutionStatus, which checks transitions
    - Recording a verification result → use updateVerificationStatus

    Args:
        params: UpdateTodoInput containing the id and the fields to change

    Returns:
        Confirmation message with the updated todo

    Examples:
        - Mark done: params with id="5", completed=true
        - Rename: params with id="5", title="New title"
        - Replace dependencies: params with id="5", dependencies=["2"]
    """
    try:
        todo = await get_manager().update_todo(params)
    except TodoError as e:
        return f"Error: {e}"
    mark = "✓" if todo.completed else " "
    return f'Todo updated successfully: [{mark}] "{todo.title}" (ID: {todo.id})'


@mcp.tool(
    name="deleteTodo",
    annotations=ToolAnnotations(
        title="Delete Todo",
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def delete_todo(params: DeleteTodoInput) -> str:
    """
    Delete a todo item by ID.

    Todos that depend on the deleted one are not changed and stay blocked.

    Args:
        params: DeleteTodoInput containing the id to delete

    Returns:
        Confirmation message
    """
    try:
        await get_manager().delete_todo(params.id)
    except TodoError as e:
        return f"Error: {e}"
    return f"Todo with ID {params.id} deleted successfully"


@mcp.tool(
    name="setVerificationMethod",
    annotations=ToolAnnotations(
        title="Set Verification Method",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def set_verification_method(params: SetVerificationMethodInput) -> str:
    """
    Attach a verification method to a todo and mark its verification as pending.

    Args:
        params: SetVerificationMethodInput containing todoId, method and optional notes

    Returns:
        Confirmation message
    """
    try:
        todo = await get_manager().set_verification_method(params.todo_id, params.method, params.notes)
    except TodoError as e:
        return f"Error: {e}"
    return f'Verification method set for "{todo.title}" (ID: {todo.id}): {todo.verification_method}'


@mcp.tool(
    name="updateVerificationStatus",
    annotations=ToolAnnotations(
        title="Update Verification Status",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def update_verification_status(params: UpdateVerificationStatusInput) -> str:
    """
    Record the outcome of verifying a todo.

    Args:
        params: UpdateVerificationStatusInput containing todoId, status and optional notes

    Returns:
        Confirmation message
    """
    try:
        todo = await get_manager().update_verification_status(params.todo_id, params.status, params.notes)
    except TodoError as e:
        return f"Error: {e}"
    return f'Verification status of "{todo.title}" (ID: {todo.id}) set to {params.status.value}'


@mcp.tool(
    name="getTodosNeedingVerification",
    annotations=ToolAnnotations(
        title="Todos Needing Verification",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def get_todos_needing_verification(params: GetTodosNeedingVerificationInput) -> str:
    """
    List todos with a verification method whose verification is still pending.

    Args:
        params: GetTodosNeedingVerificationInput with optional groupId filter

    Returns:
        Formatted list of todos awaiting verification
    """
    todos = get_manager().get_todos_needing_verification(params.group_id)
    return _render_todos(todos, params.response_format, "Todos Needing Verification")
