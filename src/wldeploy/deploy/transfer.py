"""
Library transfer step.

WebLogic deploys shared libraries from a path on the admin host, so a library
artifact is first shipped over FTP to the environment's remote directory and
every later command references that remote path.
"""

from pathlib import Path

from wldeploy.core.protocols import LOG_PREFIX, FileTransferClient, Logger

from .models import DeploymentTask, TargetEnvironment, TransferConfiguration


def remote_path_for(environment: TargetEnvironment, artifact_full_name: str) -> str:
    """Remote location of a transferred library."""
    return f"{environment.remote_dir}/{artifact_full_name}"


def prepare_source_file(
    task: DeploymentTask,
    environment: TargetEnvironment,
    artifact: Path,
    transfer_client: FileTransferClient,
    log: Logger,
) -> str:
    """
    Return the ``-source`` path for the deployer, transferring libraries first.

    Non-library artifacts are deployed from their local path. Transfer errors
    propagate to the caller.
    """
    if not task.is_library:
        return str(artifact)

    remote_path = remote_path_for(environment, artifact.name)
    config = TransferConfiguration(
        host=environment.transfer_host,
        user=environment.ftp_user,
        password=environment.ftp_password,
        local_path=str(artifact),
        remote_path=remote_path,
    )
    log.info(
        f"{LOG_PREFIX}TRANSFERRING LIBRARY : (local={artifact.name}) (remote={remote_path}) "
        f"to (ftp={config.host}@{config.user}) ..."
    )
    transfer_client.transfer(config, log)
    log.info(f"{LOG_PREFIX}LIBRARY TRANSFERRED SUCCESSFULLY.")
    return remote_path
