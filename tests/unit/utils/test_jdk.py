"""Unit tests for JDK toolchain lookup and validation."""

from unittest.mock import Mock

import pytest

from wldeploy.core.protocols import FileSystemService, Logger, ProcessRunner
from wldeploy.deploy import Node, Toolchain, ToolchainVersionError
from wldeploy.utils.jdk import JdkToolService, normalize_version, parse_java_version

JAVA8_OUTPUT = b'''java version "1.8.0_292"
Java(TM) SE Runtime Environment (build 1.8.0_292-b10)
'''
JAVA11_OUTPUT = b'openjdk version "11.0.2" 2019-01-15\nOpenJDK Runtime Environment 18.9\n'


class TestVersionParsing:

    @pytest.mark.parametrize("text,expected", [
        (JAVA8_OUTPUT.decode(), (8, 0)),
        (JAVA11_OUTPUT.decode(), (11, 0, 2)),
        ('openjdk version "17" 2021-09-14', (17,)),
        ('java version "1.6.0_45"', (6, 0)),
    ])
    def test_parse_java_version(self, text, expected):
        assert parse_java_version(text) == expected

    def test_unreadable_output(self):
        with pytest.raises(ToolchainVersionError):
            parse_java_version("command not found")

    @pytest.mark.parametrize("version,expected", [
        ("1.6", (6,)),
        ("1.8", (8,)),
        ("8", (8,)),
        ("11", (11,)),
        ("17-ea", (17,)),
    ])
    def test_normalize_version(self, version, expected):
        assert normalize_version(version) == expected

    def test_legacy_and_modern_versions_compare(self):
        assert normalize_version("1.8") < normalize_version("11")


class TestJdkToolService:

    def setup_method(self):
        self.fs = Mock(spec=FileSystemService)
        self.process = Mock(spec=ProcessRunner)
        self.log = Mock(spec=Logger)
        self.node = Node()
        self.service = JdkToolService({"jdk8": "/opt/jdk8"}, self.fs, self.process, min_version="1.8")
        self.toolchain = Toolchain("jdk8", "/opt/jdk8")

    def answer_version(self, output, exit_code=0):
        def run(cmd, env=None, stdout=None, cwd=None):
            stdout.write(output)
            return exit_code
        self.process.run.side_effect = run

    def test_find_by_name(self):
        assert self.service.find_by_name(self.node, "jdk8") == self.toolchain

    def test_find_unknown_name(self):
        assert self.service.find_by_name(self.node, "jdk11") is None

    def test_is_valid_checks_java_executable(self):
        self.fs.is_file.return_value = True

        assert self.service.is_valid(self.node, self.toolchain)
        self.fs.is_file.assert_called_once_with("/opt/jdk8/bin/java")

    def test_check_version_accepts_new_enough_jdk(self):
        self.answer_version(JAVA8_OUTPUT)

        self.service.check_version(self.node, self.toolchain, self.log)

        assert self.process.run.call_args[0][0] == ["/opt/jdk8/bin/java", "-version"]
        self.log.info.assert_any_call('java version "1.8.0_292"')

    def test_check_version_rejects_old_jdk(self):
        self.answer_version(b'java version "1.7.0_80"\n')

        with pytest.raises(ToolchainVersionError, match="older than"):
            self.service.check_version(self.node, self.toolchain, self.log)

    def test_check_version_rejects_failing_java(self):
        self.answer_version(b"Error: could not create the Java Virtual Machine\n", exit_code=1)

        with pytest.raises(ToolchainVersionError, match="exited with code 1"):
            self.service.check_version(self.node, self.toolchain, self.log)

    def test_check_version_propagates_start_failure(self):
        self.process.run.side_effect = FileNotFoundError("/opt/jdk8/bin/java")

        with pytest.raises(OSError):
            self.service.check_version(self.node, self.toolchain, self.log)
