"""Unit tests for the library transfer step."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from wldeploy.core.protocols import FileTransferClient, Logger
from wldeploy.deploy import (
    DeploymentTask,
    TargetEnvironment,
    TransferConfiguration,
    TransferError,
    prepare_source_file,
)


class TestPrepareSourceFile:

    def setup_method(self):
        self.client = Mock(spec=FileTransferClient)
        self.log = Mock(spec=Logger)
        self.artifact = Path("/ws/target/commons-1.0.jar")
        self.environment = TargetEnvironment(
            name="prod", host="wls.example.com", port=7001,
            ftp_user="deployer", ftp_password="s3cret", remote_dir="/u01/libs",
        )

    def make_task(self, is_library):
        return DeploymentTask(
            id="7", task_name="commons", built_resource_regex_to_deploy=r".*\.jar",
            target_environment_name="prod", deployment_name="commons", is_library=is_library,
        )

    def test_application_uses_local_path(self):
        source = prepare_source_file(self.make_task(False), self.environment, self.artifact, self.client, self.log)

        assert source == "/ws/target/commons-1.0.jar"
        self.client.transfer.assert_not_called()

    def test_library_is_transferred_to_remote_dir(self):
        source = prepare_source_file(self.make_task(True), self.environment, self.artifact, self.client, self.log)

        assert source == "/u01/libs/commons-1.0.jar"
        self.client.transfer.assert_called_once_with(
            TransferConfiguration(
                host="wls.example.com",
                user="deployer",
                password="s3cret",
                local_path="/ws/target/commons-1.0.jar",
                remote_path="/u01/libs/commons-1.0.jar",
            ),
            self.log,
        )

    def test_library_uses_dedicated_ftp_host(self):
        environment = TargetEnvironment(
            name="prod", host="wls.example.com", port=7001,
            ftp_host="ftp.example.com", remote_dir="/u01/libs",
        )

        prepare_source_file(self.make_task(True), environment, self.artifact, self.client, self.log)

        assert self.client.transfer.call_args[0][0].host == "ftp.example.com"

    def test_transfer_errors_propagate(self):
        self.client.transfer.side_effect = TransferError("550 permission denied")

        with pytest.raises(TransferError):
            prepare_source_file(self.make_task(True), self.environment, self.artifact, self.client, self.log)
