from aiya_todo_mcp.cli import main

main()
