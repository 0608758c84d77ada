"""Enums for Aiya Todo MCP."""

from enum import Enum


class ResponseFormat(str, Enum):
    """Output format for tool responses."""

    CONCISE = "concise"  # One line per todo, for chaining
    MARKDOWN = "markdown"  # Human-readable (default)
    JSON = "json"  # Machine-readable with all fields


class ExecutionState(str, Enum):
    """Execution lifecycle states reported by an external executor."""

    PENDING = "pending"
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class VerificationStatus(str, Enum):
    """Verification outcome for a todo with a verification method."""

    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"
