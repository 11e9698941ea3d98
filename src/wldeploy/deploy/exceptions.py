"""
Deployment exceptions.

The orchestrator converts every failure into a TaskResult; DeploymentTaskError
is the only exception that leaves ``TaskOrchestrator.perform`` and it always
carries that result.
"""


class WlDeployError(Exception):
    """Base class for every wldeploy error."""
    pass


class DeploymentTaskError(WlDeployError):
    """
    Raised when a task run ends ABORTED or FAILED.

    Attributes:
        result: The synthesized TaskResult for the run
    """

    def __init__(self, result, message: str = None):
        self.result = result
        super().__init__(message or f"Deployment task {result.task.task_name} {result.status.value}")


class ToolchainNotFoundError(WlDeployError):
    """
    Raised when the requested JDK is unknown or its executable is missing.

    Examples:
        - No JDK named 'jdk8' configured for the node
        - <home>/bin/java does not exist
    """
    pass


class ToolchainVersionError(WlDeployError):
    """Raised when the JDK version check fails."""
    pass


class ArtifactSelectionError(WlDeployError):
    """Raised when no artifact (or more than one) matches the selection pattern."""
    pass


class TransferError(WlDeployError):
    """Raised when shipping a library artifact to the remote host fails."""
    pass


class DeployerExecutionError(WlDeployError):
    """Raised when an external deployer process exits non-zero."""

    def __init__(self, exit_code: int, message: str = None):
        self.exit_code = exit_code
        super().__init__(message or f"task completed abnormally (exit code = {exit_code})")


class ConfigurationError(WlDeployError):
    """Raised when the configuration file is malformed."""
    pass
