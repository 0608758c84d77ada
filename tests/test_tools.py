"""Tests for the MCP tools and resources."""

import json

import pytest

from aiya_todo_mcp import (
    CheckMainTaskCompletionInput,
    CreateTaskGroupInput,
    CreateTodoInput,
    DeleteTodoInput,
    ExecutionState,
    GetExecutableTasksInput,
    GetTaskGroupStatusInput,
    GetTodoDependenciesInput,
    GetTodoInput,
    GetTodosNeedingVerificationInput,
    ListTodosInput,
    ResetTaskExecutionInput,
    SetVerificationMethodInput,
    TodoNotFoundError,
    UpdateExecutionStatusInput,
    UpdateTodoInput,
    UpdateVerificationStatusInput,
    check_main_task_completion,
    create_task_group,
    create_todo,
    delete_todo,
    get_executable_tasks,
    get_manager,
    get_task_group_status,
    get_todo,
    get_todo_dependencies,
    get_todos_needing_verification,
    list_todos,
    reset_task_execution,
    set_verification_method,
    todo_item,
    todo_list,
    update_execution_status,
    update_todo,
    update_verification_status,
)


def _group_input(**overrides):
    data = {
        "mainTask": {"title": "Release"},
        "subtasks": [{"title": "Test"}, {"title": "Deploy", "dependencies": [1]}],
        "groupId": "g",
    }
    data.update(overrides)
    return CreateTaskGroupInput.model_validate(data)


class TestInputModels:
    """Tests for tool input validation."""

    def test_camel_case_aliases(self):
        params = UpdateExecutionStatusInput.model_validate({"todoId": "3", "state": "running"})
        assert params.todo_id == "3"
        assert params.state == ExecutionState.RUNNING

    def test_update_requires_a_field(self):
        with pytest.raises(ValueError, match="At least one field"):
            UpdateTodoInput(id="1")

    def test_negative_subtask_index(self):
        with pytest.raises(ValueError):
            _group_input(subtasks=[{"title": "Bad", "dependencies": [-1]}])

    def test_empty_title(self):
        with pytest.raises(ValueError):
            CreateTodoInput(title="   ")


class TestGetManager:
    """Tests for the manager registry."""

    def test_uninitialized(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            get_manager()


class TestCoreTools:
    """Tests for CRUD and verification tools."""

    @pytest.mark.asyncio
    async def test_create_todo(self, installed_manager):
        result = await create_todo(CreateTodoInput(title="Buy milk"))
        assert result == 'Todo created successfully: "Buy milk" (ID: 1)'

    @pytest.mark.asyncio
    async def test_create_todo_unknown_dependency(self, installed_manager):
        result = await create_todo(CreateTodoInput(title="Deploy", dependencies=["9"]))
        assert result == "Error: Dependency with ID 9 not found"

    @pytest.mark.asyncio
    async def test_list_todos_json(self, installed_manager):
        await create_todo(CreateTodoInput(title="Buy milk"))
        data = json.loads(await list_todos(ListTodosInput(response_format="json")))

        assert data["count"] == 1
        todo = data["todos"][0]
        assert todo["id"] == "1"
        assert todo["completed"] is False
        assert "createdAt" in todo
        assert "tags" not in todo

    @pytest.mark.asyncio
    async def test_list_todos_empty(self, installed_manager):
        result = await list_todos(ListTodosInput())
        assert "No todos found." in result

    @pytest.mark.asyncio
    async def test_list_todos_filter_title(self, installed_manager):
        await create_todo(CreateTodoInput(title="A", group_id="g"))
        result = await list_todos(ListTodosInput(completed=False, group_id="g"))
        assert result.startswith("# Open Todos in group 'g'")

    @pytest.mark.asyncio
    async def test_get_todo(self, installed_manager):
        await create_todo(CreateTodoInput(title="Buy milk", tags=["home"]))

        assert await get_todo(GetTodoInput(id="1", response_format="concise")) == "[ ] 1: Buy milk"
        markdown = await get_todo(GetTodoInput(id="1"))
        assert markdown.startswith("### [ ] [1] Buy milk")
        assert "**Tags**: home" in markdown

    @pytest.mark.asyncio
    async def test_get_todo_missing(self, installed_manager):
        result = await get_todo(GetTodoInput(id="5"))
        assert result.startswith("Error: Todo with ID 5 not found.")

    @pytest.mark.asyncio
    async def test_update_todo(self, installed_manager):
        await create_todo(CreateTodoInput(title="Buy milk"))
        result = await update_todo(UpdateTodoInput(id="1", completed=True))
        assert result == 'Todo updated successfully: [✓] "Buy milk" (ID: 1)'

    @pytest.mark.asyncio
    async def test_update_todo_cycle(self, installed_manager):
        await create_todo(CreateTodoInput(title="A"))
        await create_todo(CreateTodoInput(title="B", dependencies=["1"]))

        result = await update_todo(UpdateTodoInput(id="1", dependencies=["2"]))
        assert result.startswith("Error: Circular dependency detected: 1 -> 2 -> 1")

    @pytest.mark.asyncio
    async def test_delete_todo(self, installed_manager):
        await create_todo(CreateTodoInput(title="Buy milk"))

        assert await delete_todo(DeleteTodoInput(id="1")) == "Todo with ID 1 deleted successfully"
        assert await delete_todo(DeleteTodoInput(id="1")) == "Error: Todo with ID 1 not found"

    @pytest.mark.asyncio
    async def test_verification_flow(self, installed_manager):
        await create_todo(CreateTodoInput(title="Ship"))

        result = await set_verification_method(SetVerificationMethodInput(todo_id="1", method="check logs"))
        assert result == 'Verification method set for "Ship" (ID: 1): check logs'

        pending = await get_todos_needing_verification(GetTodosNeedingVerificationInput(response_format="concise"))
        assert pending.splitlines()[0] == "1 todo(s) | Todos Needing Verification"

        result = await update_verification_status(UpdateVerificationStatusInput(todo_id="1", status="verified"))
        assert result == 'Verification status of "Ship" (ID: 1) set to verified'

        pending = await get_todos_needing_verification(GetTodosNeedingVerificationInput(response_format="concise"))
        assert pending == "0 todos"


class TestExecutionTools:
    """Tests for task group and execution tools."""

    @pytest.mark.asyncio
    async def test_create_task_group(self, installed_manager):
        result = await create_task_group(_group_input())

        lines = result.splitlines()
        assert lines[0] == "Task group created successfully: g"
        assert lines[1] == "Main task: Release (ID: 1)"
        assert "  2. Deploy (ID: 3) (depends on: 2)" in lines

    @pytest.mark.asyncio
    async def test_create_task_group_rollback(self, installed_manager):
        result = await create_task_group(_group_input(subtasks=[{"title": "Bad", "dependencies": [3]}]))

        assert result.startswith("Error: ")
        assert result.endswith("No todos were created.")
        assert installed_manager.get_all_todos() == []

    @pytest.mark.asyncio
    async def test_get_executable_tasks(self, installed_manager):
        await create_task_group(_group_input())

        markdown = await get_executable_tasks(GetExecutableTasksInput(group_id="g"))
        assert markdown.startswith("# Executable Tasks (2)")

        data = json.loads(await get_executable_tasks(GetExecutableTasksInput(limit=1, response_format="json")))
        assert data["count"] == 1
        assert data["tasks"][0]["executionOrder"] == 0

    @pytest.mark.asyncio
    async def test_get_executable_tasks_none(self, installed_manager):
        result = await get_executable_tasks(GetExecutableTasksInput())
        assert "No tasks are ready for execution." in result

    @pytest.mark.asyncio
    async def test_invalid_transition(self, installed_manager):
        await create_todo(CreateTodoInput(title="A"))
        result = await update_execution_status(UpdateExecutionStatusInput(todo_id="1", state="completed"))
        assert result == "Error: Invalid state transition from pending to completed"

    @pytest.mark.asyncio
    async def test_transition_unknown_todo(self, installed_manager):
        result = await update_execution_status(UpdateExecutionStatusInput(todo_id="8", state="running"))
        assert result == "Error: Todo with ID 8 not found"

    @pytest.mark.asyncio
    async def test_group_completion(self, installed_manager):
        await create_task_group(_group_input())

        for todo_id in ("2", "3"):
            await update_execution_status(UpdateExecutionStatusInput(todo_id=todo_id, state="running"))
            result = await update_execution_status(UpdateExecutionStatusInput(todo_id=todo_id, state="completed"))

        assert result.startswith("Execution status updated: running → completed (attempts: 1)")
        assert "Main task completed: Release (ID: 1)" in result

        data = json.loads(await get_task_group_status(GetTaskGroupStatusInput(group_id="g", response_format="json")))
        assert data["stats"]["completed"] == 3
        assert data["mainTask"]["completed"] is True

        check = await check_main_task_completion(CheckMainTaskCompletionInput(group_id="g"))
        assert check.startswith("Main task completed: Main task is already completed")

    @pytest.mark.asyncio
    async def test_check_main_task_incomplete(self, installed_manager):
        await create_task_group(_group_input())
        result = await check_main_task_completion(CheckMainTaskCompletionInput(group_id="g"))
        assert result.startswith("Main task not completed: 2 of 2 subtask(s) still incomplete")

    @pytest.mark.asyncio
    async def test_group_status_markdown(self, installed_manager):
        await create_task_group(_group_input())
        result = await get_task_group_status(GetTaskGroupStatusInput(group_id="g"))

        assert result.startswith("# Task Group g")
        assert "**Main task**: [1] Release" in result
        assert "| 2 | 3 | Deploy |" in result

    @pytest.mark.asyncio
    async def test_group_status_unknown(self, installed_manager):
        result = await get_task_group_status(GetTaskGroupStatusInput(group_id="nope"))
        assert result == "Error: Task group nope not found"

    @pytest.mark.asyncio
    async def test_reset_task_execution(self, installed_manager):
        await create_todo(CreateTodoInput(title="A"))
        assert (
            await reset_task_execution(ResetTaskExecutionInput(todo_id="1"))
            == "Error: Todo 1 is not in failed state"
        )

        await update_execution_status(UpdateExecutionStatusInput(todo_id="1", state="running"))
        await update_execution_status(UpdateExecutionStatusInput(todo_id="1", state="failed", error="boom"))

        result = await reset_task_execution(ResetTaskExecutionInput(todo_id="1"))
        assert result.splitlines() == ["1 todo(s) | reset to pending", "[ ] 1: A (pending)"]

    @pytest.mark.asyncio
    async def test_get_todo_dependencies(self, installed_manager):
        await create_todo(CreateTodoInput(title="A", completed=True))
        await create_todo(CreateTodoInput(title="B", dependencies=["1"]))
        await create_todo(CreateTodoInput(title="C", dependencies=["2"]))

        concise = await get_todo_dependencies(GetTodoDependenciesInput(todo_id="2", response_format="concise"))
        assert concise == "2: ready | blocked_by:1 | blocks:3"

        markdown = await get_todo_dependencies(GetTodoDependenciesInput(todo_id="3"))
        assert "- Status: BLOCKED" in markdown
        assert "└── [2] B" in markdown


class TestResources:
    """Tests for todo:// resources."""

    @pytest.mark.asyncio
    async def test_todo_list(self, installed_manager):
        await create_todo(CreateTodoInput(title="A"))
        data = json.loads(todo_list())
        assert [t["title"] for t in data] == ["A"]

    @pytest.mark.asyncio
    async def test_todo_item(self, installed_manager):
        await create_todo(CreateTodoInput(title="A"))
        assert json.loads(todo_item("1"))["title"] == "A"

        with pytest.raises(TodoNotFoundError):
            todo_item("2")
