"""
Deployment task subsystem.

Runs one deployment task against one WebLogic target environment through the
external weblogic.Deployer tool:
    - TaskOrchestrator: prerequisite checks, mode dispatch, result synthesis
    - build_command_line: weblogic.Deployer argument vectors
    - replace_tokens: {wl.*} substitution in custom command lines
    - prepare_source_file: FTP transfer of library artifacts

Public API:
    - TaskOrchestrator, skip_flag_name
    - DeploymentTask, TargetEnvironment, TaskResult, ...: Data model
    - DeploymentTaskError and friends: Exceptions
"""

from .models import (
    BuildContext,
    DeployerCommand,
    DeployerConfig,
    DeployerParameters,
    DeploymentStatus,
    DeploymentTask,
    Node,
    PrerequisiteStatus,
    StageMode,
    TargetEnvironment,
    TaskResult,
    Toolchain,
    TransferConfiguration,
    resolve_task,
)
from .exceptions import (
    WlDeployError,
    DeploymentTaskError,
    ToolchainNotFoundError,
    ToolchainVersionError,
    ArtifactSelectionError,
    TransferError,
    DeployerExecutionError,
    ConfigurationError,
)
from .command import build_command_line
from .tokens import DeployerTokenResolver, replace_tokens, split_command_line, tokenize_command
from .transfer import prepare_source_file
from .orchestrator import TaskOrchestrator, skip_flag_name

__all__ = [
    # Data model
    "BuildContext",
    "DeployerCommand",
    "DeployerConfig",
    "DeployerParameters",
    "DeploymentStatus",
    "DeploymentTask",
    "Node",
    "PrerequisiteStatus",
    "StageMode",
    "TargetEnvironment",
    "TaskResult",
    "Toolchain",
    "TransferConfiguration",
    "resolve_task",

    # Exceptions
    "WlDeployError",
    "DeploymentTaskError",
    "ToolchainNotFoundError",
    "ToolchainVersionError",
    "ArtifactSelectionError",
    "TransferError",
    "DeployerExecutionError",
    "ConfigurationError",

    # Building blocks
    "build_command_line",
    "DeployerTokenResolver",
    "replace_tokens",
    "split_command_line",
    "tokenize_command",
    "prepare_source_file",

    # Orchestration
    "TaskOrchestrator",
    "skip_flag_name",
]
