"""Process exit codes for relflow commands.

A release run either completes or stops on its first error; the exit code
tells the operator (or CI) which family of failure stopped it.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are part of the CLI contract and should remain stable:
    - 0: Success
    - 1: User error (missing --version, malformed version, bad config, notes)
    - 2: Environment error (missing credentials)
    - 3: Gate failed (tag/release already exists, lint or archive failure)
    - 4: Tool error (pod, carthage, gh or git exited non-zero)
    - 5: I/O error (file could not be read or written)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    GATE_FAILED = 3
    TOOL_ERROR = 4
    IO_ERROR = 5
