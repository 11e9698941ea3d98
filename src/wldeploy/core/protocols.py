"""Protocol definitions for dependency injection.

Every collaborator the deployment orchestrator talks to is described here as a
structural ``typing.Protocol``. Any class implementing these methods satisfies
the Protocol without explicit inheritance.

Benefits:
- Easy to mock in tests (``Mock(spec=ProcessRunner)``)
- Local and remote implementations are interchangeable
- Clear interface contracts for the external pieces (JDK lookup, artifact
  selection, FTP transfer, process spawning)
"""

from typing import Protocol, Dict, Any, Optional, List, Union, Iterator, BinaryIO, Mapping, Sequence
from pathlib import Path

# Prefix of every operator-facing log line
LOG_PREFIX = "[wldeploy] - "


class Logger(Protocol):
    """Abstraction for operator-facing log lines."""

    def info(self, message: str) -> None:
        """Log informational message."""
        ...

    def warning(self, message: str) -> None:
        """Log warning message."""
        ...

    def error(self, message: str) -> None:
        """Log error message."""
        ...

    def debug(self, message: str) -> None:
        """Log debug message."""
        ...


class FileSystemService(Protocol):
    """Abstraction for filesystem operations.

    Wraps all Path and file I/O operations to enable testing without
    real filesystem access.
    """

    def exists(self, path: Union[str, Path]) -> bool:
        """Check if path exists."""
        ...

    def is_file(self, path: Union[str, Path]) -> bool:
        """Check if path is a file."""
        ...

    def read_file(self, path: Union[str, Path]) -> str:
        """Read entire file as string."""
        ...

    def mkdir(self, path: Union[str, Path], parents: bool = True, exist_ok: bool = True) -> None:
        """Create directory (with parents if specified)."""
        ...

    def copy(self, source: Union[str, Path], destination: Union[str, Path]) -> None:
        """Copy a single file."""
        ...

    def walk_files(self, path: Union[str, Path]) -> Iterator[Path]:
        """Iterate over every regular file below path."""
        ...

    def open(self, path: Union[str, Path], mode: str = 'r', buffering: int = -1) -> Any:
        """Open file and return file handle."""
        ...


class ProcessHandle(Protocol):
    """Handle on a started process."""

    def poll(self) -> Optional[int]:
        """Check if process has terminated. Returns exit code or None."""
        ...

    def join(self) -> int:
        """Wait for process to terminate and return exit code."""
        ...


class ProcessRunner(Protocol):
    """Abstraction for external process execution.

    Two operations: run-to-completion and start/join. Output (stderr merged
    into stdout) is streamed into the ``stdout`` sink. Implementations may
    run locally or on a remote execution agent.
    """

    def run(
        self,
        cmd: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        stdout: Optional[BinaryIO] = None,
        cwd: Optional[str] = None,
    ) -> int:
        """Execute command, block until it exits and return its exit code."""
        ...

    def start(
        self,
        cmd: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        stdout: Optional[BinaryIO] = None,
        cwd: Optional[str] = None,
    ) -> ProcessHandle:
        """Start command and return a handle to join later."""
        ...


class EnvironmentProvider(Protocol):
    """Resolves the variables visible to a build."""

    def resolve(self, build: Any) -> Optional[Dict[str, str]]:
        """Return the build's environment variables (None if unavailable)."""
        ...


class ToolchainService(Protocol):
    """Locates and validates JDK installations on an execution node."""

    def find_by_name(self, node: Any, name: str) -> Optional[Any]:
        """Return the named toolchain, or None if the node does not know it."""
        ...

    def is_valid(self, node: Any, toolchain: Any) -> bool:
        """Check that the toolchain's executable exists on the node."""
        ...

    def check_version(self, node: Any, toolchain: Any, log: Logger) -> None:
        """Raise ToolchainVersionError if the toolchain is too old."""
        ...


class ArtifactSelector(Protocol):
    """Picks the built artifact to deploy."""

    def select(self, build: Any, log: Logger, pattern: str, base_dir: Optional[str]) -> Path:
        """Return the single artifact matching pattern under base_dir."""
        ...


class FileTransferClient(Protocol):
    """Ships a local file to a remote host."""

    def transfer(self, config: Any, log: Logger) -> None:
        """Upload config.local_path to config.remote_path on config.host."""
        ...


class TargetEnvironmentStore(Protocol):
    """Source of configured target environments."""

    def all(self) -> List[Any]:
        """Return every configured environment, in configuration order."""
        ...


class RemoteFileStager(Protocol):
    """Copies classpath entries into a node workspace."""

    def stage(self, build: Any, paths: Sequence[str], log: Logger) -> None:
        """Copy each path into build.workspace unless a same-named file exists."""
        ...


class ConfigLoader(Protocol):
    """Abstraction for configuration file loading."""

    def load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file and return parsed dictionary."""
        ...
