"""JDK toolchain lookup and validation.

JDK installations are declared by name in the configuration file; a node
can use a JDK when ``<home>/bin/java`` exists and ``java -version`` reports a
version at least as new as the configured minimum.
"""
import io
import logging
import re
from typing import Dict, Optional, Tuple

from wldeploy.core.protocols import FileSystemService, Logger, ProcessRunner
from wldeploy.deploy.exceptions import ToolchainVersionError
from wldeploy.deploy.models import Node, Toolchain

logger = logging.getLogger(__name__)

# java version "1.8.0_292" / openjdk version "11.0.2" 2019-01-15
VERSION_PATTERN = re.compile(r'version "([^"]+)"')


def parse_java_version(text: str) -> Tuple[int, ...]:
    """Extract a comparable version tuple from ``java -version`` output.

    Legacy ``1.x`` versions are normalized to ``x`` so that 1.8 and 8 compare
    equal, e.g. "1.8.0_292" -> (8, 0), "11.0.2" -> (11, 0, 2).
    """
    match = VERSION_PATTERN.search(text)
    if not match:
        raise ToolchainVersionError(f"Unable to read the JDK version from: {text.strip()!r}")
    return normalize_version(match.group(1))


def normalize_version(version: str) -> Tuple[int, ...]:
    parts = [int(p) for p in re.findall(r'\d+', version.split('-')[0].split('_')[0])]
    if not parts:
        raise ToolchainVersionError(f"Invalid JDK version: {version!r}")
    if parts[0] == 1 and len(parts) > 1:
        parts = parts[1:]
    return tuple(parts)


class JdkToolService:
    """Toolchain service backed by the configured JDK installations.

    Args:
        installations: JDK name -> home directory
        filesystem: Used to check the java executable exists
        process_runner: Used to run ``java -version``
        min_version: Oldest accepted version ("1.6", "8", "11", ...)
    """

    def __init__(
        self,
        installations: Dict[str, str],
        filesystem: FileSystemService,
        process_runner: ProcessRunner,
        min_version: str = "1.6",
    ):
        self.installations = dict(installations)
        self.fs = filesystem
        self.process = process_runner
        self.min_version = normalize_version(min_version)

    def find_by_name(self, node: Node, name: str) -> Optional[Toolchain]:
        home = self.installations.get(name)
        if home is None:
            return None
        return Toolchain(name=name, home=home)

    def is_valid(self, node: Node, toolchain: Toolchain) -> bool:
        return self.fs.is_file(toolchain.java_executable)

    def check_version(self, node: Node, toolchain: Toolchain, log: Logger) -> None:
        """Run ``java -version`` and reject JDKs older than min_version.

        Raises:
            ToolchainVersionError: Version too old, unreadable, or java failed
            OSError: If java cannot be started
        """
        output = io.BytesIO()
        exit_code = self.process.run([toolchain.java_executable, '-version'], stdout=output)
        text = output.getvalue().decode('utf-8', errors='replace')
        for line in text.splitlines():
            log.info(line)

        if exit_code != 0:
            raise ToolchainVersionError(f"'{toolchain.java_executable} -version' exited with code {exit_code}")

        version = parse_java_version(text)
        logger.debug("JDK %s reports version %s", toolchain.name, version)
        if version < self.min_version:
            raise ToolchainVersionError(
                f"JDK {toolchain.name} version {'.'.join(map(str, version))} is older than the "
                f"required {'.'.join(map(str, self.min_version))}"
            )
