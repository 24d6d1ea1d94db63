"""Centralized exit codes for the AQUA CLI."""


class ExitCodes:
    """Standard exit codes for AQUA CLI commands."""

    SUCCESS = 0

    STAGE_FAILED = 1

    TASK_INCOMPLETE = 3

    CONFIG_ERROR = 4

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - all checks passed",
            cls.STAGE_FAILED: "One or more checks reported errors",
            cls.TASK_INCOMPLETE: "Task could not be completed (unknown task name)",
            cls.CONFIG_ERROR: "Configuration could not be loaded",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")

    @classmethod
    def should_fail_pipeline(cls, code: int) -> bool:
        """Determine if an exit code should fail a CI/CD pipeline."""

        return code != cls.SUCCESS
