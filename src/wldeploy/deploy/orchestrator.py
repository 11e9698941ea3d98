"""Deployment task orchestration with dependency injection.

TaskOrchestrator runs one DeploymentTask against one target environment:

    skip flag -> JDK -> log file -> artifact -> exclusion list -> environment
    -> library staging -> (undeploy + deploy | custom command list) -> result

Every exit path produces a TaskResult. DISABLED and SUCCEEDED are returned;
ABORTED and FAILED are raised inside a DeploymentTaskError. The per-run log
file is closed on every path once it has been opened.
"""

import os
from pathlib import Path
from typing import BinaryIO, List, Mapping, Optional

from wldeploy.core.protocols import (
    LOG_PREFIX,
    ArtifactSelector,
    EnvironmentProvider,
    FileSystemService,
    FileTransferClient,
    Logger,
    ProcessRunner,
    RemoteFileStager,
    TargetEnvironmentStore,
    ToolchainService,
)
from wldeploy.utils.paths import deployment_log_file
from wldeploy.utils.variables import to_boolean

from .command import build_command_line
from .exceptions import (
    DeployerExecutionError,
    DeploymentTaskError,
    ToolchainNotFoundError,
    ToolchainVersionError,
)
from .models import (
    BuildContext,
    DeployerCommand,
    DeployerConfig,
    DeployerParameters,
    DeploymentStatus,
    DeploymentTask,
    PrerequisiteStatus,
    TargetEnvironment,
    TaskResult,
    Toolchain,
    resolve_task,
)
from .tokens import DeployerTokenResolver, split_command_line, tokenize_command
from .transfer import prepare_source_file

DEPLOYMENT_BANNER = b"------ ARTIFACT DEPLOYMENT ------\n"
UNDEPLOYMENT_BANNER = b"------ ARTIFACT UNDEPLOYMENT ------\n"
EXECUTION_BANNER = b"------ TASK EXECUTION ------\n"


def skip_flag_name(task_name: str) -> str:
    """Name of the variable that disables a task for one run."""
    return f"DEPLOY_{task_name}_SKIP".upper()


class TaskOrchestrator:
    """Runs deployment tasks with injected collaborators.

    Args:
        config: Deployer settings (java options, classpath, exclusion list)
        env_provider: Resolves the build's variables
        toolchains: JDK lookup and validation
        artifact_selector: Picks the artifact to deploy
        process_runner: Spawns weblogic.Deployer
        transfer_client: Ships library artifacts over FTP
        file_stager: Copies classpath entries to remote workspaces
        target_store: Configured target environments
        filesystem: Filesystem operations abstraction (log file)
        logger: Operator log
        token_resolver: Resolver for ``{wl.*}`` tokens in custom commands
    """

    def __init__(
        self,
        config: DeployerConfig,
        env_provider: EnvironmentProvider,
        toolchains: ToolchainService,
        artifact_selector: ArtifactSelector,
        process_runner: ProcessRunner,
        transfer_client: FileTransferClient,
        file_stager: RemoteFileStager,
        target_store: TargetEnvironmentStore,
        filesystem: FileSystemService,
        logger: Logger,
        token_resolver: Optional[DeployerTokenResolver] = None,
    ):
        self.config = config
        self.env = env_provider
        self.toolchains = toolchains
        self.selector = artifact_selector
        self.process = process_runner
        self.transfer = transfer_client
        self.stager = file_stager
        self.targets = target_store
        self.fs = filesystem
        self.log = logger
        self.tokens = token_resolver or DeployerTokenResolver()

    def perform(self, task: DeploymentTask, jdk_name: str, build: BuildContext) -> TaskResult:
        """Run task against its target environment.

        Returns:
            TaskResult with status DISABLED or SUCCEEDED

        Raises:
            DeploymentTaskError: carrying an ABORTED or FAILED TaskResult
        """
        env_vars = self.env.resolve(build)
        history = resolve_task(task, env_vars)

        flag = skip_flag_name(task.task_name)
        if env_vars is not None and to_boolean(env_vars.get(flag)):
            self.log.info(
                f"{LOG_PREFIX}The variable '{flag}' has been set to true. "
                f"The deployment task {task.task_name} is currently disabled."
            )
            return TaskResult(PrerequisiteStatus.OK, DeploymentStatus.DISABLED, history)

        toolchain = self._load_toolchain(jdk_name, build, history)

        log_path = deployment_log_file(build, task.id)
        try:
            self.fs.mkdir(log_path.parent)
            log_out = self.fs.open(log_path, 'wb')
        except OSError as e:
            self.log.error(f"{LOG_PREFIX}Failed to open deployment log file {log_path}: {e}")
            raise self._terminated(DeploymentStatus.ABORTED, history)

        with log_out:
            try:
                artifact = Path(self.selector.select(
                    build, self.log,
                    task.built_resource_regex_to_deploy,
                    task.base_resources_generated_directory,
                ))
            except Exception as e:
                self.log.error(f"{LOG_PREFIX}Failed to get artifact from archive directory: {e}")
                raise self._terminated(DeploymentStatus.ABORTED, history) from e

            artifact_name = artifact.stem
            artifact_full_name = artifact.name

            try:
                self._check_exclusion(artifact_name, history, artifact_full_name)

                environment = self._find_environment(task.target_environment_name)
                if environment is None:
                    self.log.error(
                        f"{LOG_PREFIX}Target environment {task.target_environment_name} not found "
                        f"in the list. Please check the configuration file."
                    )
                    raise self._terminated(DeploymentStatus.ABORTED, history, artifact_full_name)

                if not build.node.is_local:
                    self.stager.stage(build, self._classpath_entries(), self.log)

                self.log.info(
                    f"{LOG_PREFIX}Deploying the artifact on the following target : "
                    f"(name={task.target_environment_name}) (host={environment.host}) "
                    f"(port={environment.port})"
                )
                if task.is_custom:
                    self._customize(history, toolchain, environment, artifact, log_out, env_vars)
                else:
                    self._undeploy(history, toolchain, environment, artifact_name, log_out, env_vars)
                    self._deploy(history, toolchain, environment, artifact, log_out, env_vars)
            except DeploymentTaskError:
                raise
            except Exception as e:
                self.log.error(f"{LOG_PREFIX}Failed to deploy: {e}")
                raise self._terminated(DeploymentStatus.FAILED, history, artifact_full_name) from e

        return TaskResult(PrerequisiteStatus.OK, DeploymentStatus.SUCCEEDED, history, artifact_full_name)

    def _terminated(self, status: DeploymentStatus, history: DeploymentTask,
                    artifact_full_name: Optional[str] = None) -> DeploymentTaskError:
        return DeploymentTaskError(
            TaskResult(PrerequisiteStatus.OK, status, history, artifact_full_name)
        )

    def _load_toolchain(self, jdk_name: str, build: BuildContext, history: DeploymentTask) -> Toolchain:
        """Resolve and validate the JDK, converting every failure into ABORTED."""
        node = build.node
        try:
            self.log.info(f"{LOG_PREFIX}Loading JDK '{jdk_name}' ...")
            toolchain = self.toolchains.find_by_name(node, jdk_name)
            if toolchain is None:
                raise ToolchainNotFoundError(f"No JDK '{jdk_name}' found on node {node}.")

            self.log.info(f"{LOG_PREFIX}Checking if JDK '{jdk_name}' exists on node {node} ...")
            if not self.toolchains.is_valid(node, toolchain):
                raise ToolchainNotFoundError(
                    f"Unable to find the JDK's executable [{toolchain.name}, "
                    f"exec: {toolchain.java_executable}] on node : {node}"
                )

            self.toolchains.check_version(node, toolchain, self.log)
        except (ToolchainNotFoundError, ToolchainVersionError) as e:
            self.log.error(f"{LOG_PREFIX}No JDK found [reason : {e}]. The plugin execution is disabled.")
            raise self._terminated(DeploymentStatus.ABORTED, history) from e
        except OSError as e:
            self.log.error(
                f"{LOG_PREFIX}Unable to load JDK '{jdk_name}' from node '{node}': {e}. "
                f"The plugin execution is disabled."
            )
            raise self._terminated(DeploymentStatus.ABORTED, history) from e

        self.log.info(f"{LOG_PREFIX}The JDK {toolchain.home} will be used.")
        return toolchain

    def _check_exclusion(self, artifact_name: str, history: DeploymentTask, artifact_full_name: str) -> None:
        pattern = self.config.excluded_artifact_name_pattern
        if pattern and pattern.fullmatch(artifact_name):
            self.log.error(
                f"{LOG_PREFIX}The artifact Name {artifact_name} is excluded from deployment (see exclusion list)."
            )
            raise self._terminated(DeploymentStatus.ABORTED, history, artifact_full_name)

    def _find_environment(self, name: str) -> Optional[TargetEnvironment]:
        """Case-insensitive lookup of a configured target environment."""
        if not name:
            return None
        for environment in self.targets.all() or []:
            if environment.name.lower() == name.lower():
                return environment
        return None

    def _classpath_entries(self) -> List[str]:
        classpath = self.config.extra_classpath or ''
        return [entry for entry in classpath.split(os.pathsep) if entry.strip()]

    def _parameters(self, task: DeploymentTask, toolchain: Toolchain, environment: TargetEnvironment,
                    artifact_name: str, source: Optional[str], command: Optional[DeployerCommand],
                    no_exit: bool, deployment_plan: Optional[str]) -> DeployerParameters:
        return DeployerParameters(
            toolchain=toolchain,
            deployment_name=task.deployment_name,
            is_library=task.is_library,
            deployment_targets=task.deployment_targets,
            environment=environment,
            artifact_name=artifact_name,
            source=source,
            command=command,
            no_exit=no_exit,
            java_opts=self.config.java_opts,
            classpath=self.config.extra_classpath,
            stage_mode=task.stage_mode,
            deployment_plan=deployment_plan,
            protocol=task.protocol,
        )

    def _undeploy(self, task: DeploymentTask, toolchain: Toolchain, environment: TargetEnvironment,
                  artifact_name: str, log_out: BinaryIO, env_vars: Optional[Mapping[str, str]]) -> None:
        params = self._parameters(task, toolchain, environment, artifact_name,
                                  source=None, command=DeployerCommand.UNDEPLOY,
                                  no_exit=True, deployment_plan=None)
        command = build_command_line(params)

        log_out.write(UNDEPLOYMENT_BANNER)
        self.log.info(f"{LOG_PREFIX}UNDEPLOYING ARTIFACT...")
        # start + join leaves room for cancelling a hung undeploy
        handle = self.process.start(command, env=env_vars, stdout=log_out)
        exit_code = handle.join()
        if exit_code != 0:
            if self.config.tolerate_undeploy_failure:
                self.log.warning(
                    f"{LOG_PREFIX}Undeployment completed abnormally (exit code = {exit_code}), continuing."
                )
                return
            raise DeployerExecutionError(exit_code, f"undeployment completed abnormally (exit code = {exit_code})")
        self.log.info(f"{LOG_PREFIX}ARTIFACT UNDEPLOYED SUCCESSFULLY.")

    def _deploy(self, task: DeploymentTask, toolchain: Toolchain, environment: TargetEnvironment,
                artifact: Path, log_out: BinaryIO, env_vars: Optional[Mapping[str, str]]) -> None:
        source = prepare_source_file(task, environment, artifact, self.transfer, self.log)
        params = self._parameters(task, toolchain, environment, artifact.stem,
                                  source=source, command=DeployerCommand.DEPLOY,
                                  no_exit=False, deployment_plan=task.deployment_plan)
        command = build_command_line(params)

        self.log.info(f"{LOG_PREFIX}DEPLOYING ARTIFACT...")
        log_out.write(DEPLOYMENT_BANNER)
        exit_code = self.process.run(command, env=env_vars, stdout=log_out)
        if exit_code != 0:
            raise DeployerExecutionError(exit_code)
        self.log.info(f"{LOG_PREFIX}ARTIFACT DEPLOYED SUCCESSFULLY.")

    def _customize(self, task: DeploymentTask, toolchain: Toolchain, environment: TargetEnvironment,
                   artifact: Path, log_out: BinaryIO, env_vars: Optional[Mapping[str, str]]) -> None:
        source = prepare_source_file(task, environment, artifact, self.transfer, self.log)
        params = self._parameters(task, toolchain, environment, artifact.stem,
                                  source=source, command=None,
                                  no_exit=True, deployment_plan=task.deployment_plan)

        for fragment in split_command_line(task.command_line):
            command = build_command_line(params, tokenize_command(fragment, params, self.tokens))

            log_out.write(EXECUTION_BANNER)
            self.log.info(f"{LOG_PREFIX}EXECUTING TASK ...")
            exit_code = self.process.run(command, env=env_vars, stdout=log_out)
            if exit_code != 0:
                raise DeployerExecutionError(
                    exit_code,
                    f"task completed abnormally (exit code = {exit_code}). Check your deployment logs."
                )
        self.log.info(f"{LOG_PREFIX}ARTIFACT DEPLOYED SUCCESSFULLY.")
