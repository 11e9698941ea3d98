"""
Deployment data model.

Every record here is an immutable dataclass: a run builds its own parameter
bundles and produces exactly one TaskResult. Variable resolution yields a new
task copy (see ``resolve_task``), never an in-place update.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from wldeploy.utils.variables import expand_env_vars


class DeploymentStatus(Enum):
    """Terminal classification of one orchestration run."""
    DISABLED = "DISABLED"
    ABORTED = "ABORTED"
    FAILED = "FAILED"
    SUCCEEDED = "SUCCEEDED"


class PrerequisiteStatus(Enum):
    """Coarse prerequisite gate, reported independently of the deployment."""
    OK = "OK"
    KO = "KO"


class DeployerCommand(Enum):
    """Operation kinds understood by the standard command line."""
    DEPLOY = "deploy"
    UNDEPLOY = "undeploy"


class StageMode(Enum):
    """weblogic.Deployer staging flag (BY_DEFAULT emits nothing)."""
    BY_DEFAULT = "bydefault"
    STAGE = "stage"
    NOSTAGE = "nostage"
    EXTERNAL_STAGE = "external_stage"

    @classmethod
    def parse(cls, value) -> "StageMode":
        if value is None or value == "":
            return cls.BY_DEFAULT
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for mode in cls:
            if mode.value == normalized or mode.name.lower() == normalized:
                return mode
        raise ValueError(f"Unknown stage mode: {value!r}")


@dataclass(frozen=True)
class Node:
    """Execution node a build runs on."""
    name: str = ""
    label: str = ""
    is_local: bool = True

    def __str__(self) -> str:
        return f"{self.name or 'local'}({self.label})"


@dataclass(frozen=True)
class BuildContext:
    """
    Identity and surroundings of the build being deployed.

    Attributes:
        build_id: Build number / identifier, used for the log file path
        job_name: Owning job, used for the log file path
        workspace: Directory holding the built artifacts
        node: Node the build executed on
        variables: Build parameters layered over the process environment
        log_dir: Root directory for per-run deployment logs
    """
    build_id: str
    job_name: str
    workspace: Path
    node: Node = field(default_factory=Node)
    variables: Mapping[str, str] = field(default_factory=dict)
    log_dir: Path = Path("deployment-logs")


@dataclass(frozen=True)
class Toolchain:
    """A named JDK installation."""
    name: str
    home: str

    @property
    def java_executable(self) -> str:
        return f"{self.home}/bin/java"


@dataclass(frozen=True)
class DeploymentTask:
    """
    One unit of deployment work, as persisted in configuration.

    A non-blank ``command_line`` selects custom mode; otherwise the task runs
    the standard undeploy + deploy sequence.
    """
    id: str
    task_name: str
    built_resource_regex_to_deploy: str
    target_environment_name: str
    deployment_name: str
    base_resources_generated_directory: Optional[str] = None
    is_library: bool = False
    deployment_targets: str = "AdminServer"
    stage_mode: StageMode = StageMode.BY_DEFAULT
    deployment_plan: Optional[str] = None
    protocol: Optional[str] = None
    command_line: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        return bool(self.command_line and self.command_line.strip())


def resolve_task(task: DeploymentTask, env: Optional[Mapping[str, str]]) -> DeploymentTask:
    """Return a history copy of task with its deployment targets expanded."""
    return replace(task, deployment_targets=expand_env_vars(task.deployment_targets, env))


@dataclass(frozen=True)
class TargetEnvironment:
    """Named WebLogic domain reachable through its admin server."""
    name: str
    host: str
    port: int
    protocol: str = "t3"
    login: Optional[str] = None
    password: Optional[str] = None
    ftp_host: Optional[str] = None
    ftp_user: Optional[str] = None
    ftp_password: Optional[str] = None
    remote_dir: Optional[str] = None

    @property
    def transfer_host(self) -> str:
        """FTP host, falling back to the admin host when unset."""
        if self.ftp_host and self.ftp_host.strip():
            return self.ftp_host
        return self.host


@dataclass(frozen=True)
class DeployerParameters:
    """Everything the command builder needs for one deployer invocation."""
    toolchain: Toolchain
    deployment_name: str
    is_library: bool
    deployment_targets: str
    environment: TargetEnvironment
    artifact_name: str
    source: Optional[str]
    command: Optional[DeployerCommand]
    no_exit: bool
    java_opts: Optional[str]
    classpath: Optional[str]
    stage_mode: StageMode
    deployment_plan: Optional[str]
    protocol: Optional[str]


@dataclass(frozen=True)
class TransferConfiguration:
    host: str
    user: Optional[str]
    password: Optional[str]
    local_path: str
    remote_path: str


@dataclass(frozen=True)
class TaskResult:
    """
    Outcome of one orchestration run.

    Attributes:
        prerequisite_status: Gate result (always OK today)
        status: Terminal deployment status
        task: Task snapshot with variables resolved
        artifact_full_name: Selected artifact file name, None until known
    """
    prerequisite_status: PrerequisiteStatus
    status: DeploymentStatus
    task: DeploymentTask
    artifact_full_name: Optional[str] = None


@dataclass(frozen=True)
class DeployerConfig:
    """
    Deployer-wide settings shared by every task.

    Attributes:
        java_opts: Extra JVM options for weblogic.Deployer
        extra_classpath: os.pathsep-separated classpath (weblogic.jar, ...)
        excluded_artifact_name_pattern: Artifact names fully matching this are never deployed
        tolerate_undeploy_failure: Continue with deploy when undeploy exits non-zero
        log_dir: Root directory of per-run deployment logs
        min_java_version: Oldest accepted JDK version, e.g. "1.6" or "11"
    """
    java_opts: Optional[str] = None
    extra_classpath: Optional[str] = None
    excluded_artifact_name_pattern: Optional[re.Pattern] = None
    tolerate_undeploy_failure: bool = False
    log_dir: Path = Path("deployment-logs")
    min_java_version: str = "1.6"
