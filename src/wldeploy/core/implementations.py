"""Production implementations of dependency injection protocols.

This module provides real implementations that wrap actual external dependencies
(filesystem, subprocess, FTP, environment). These are used in production code.

For testing, use mocks or test doubles instead of these implementations.
"""

import ftplib
import logging
import os
import re
import shutil
import subprocess
import sys
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union, Iterator, BinaryIO, Mapping, Sequence

from wldeploy.deploy.exceptions import ArtifactSelectionError, TransferError
from wldeploy.core.protocols import LOG_PREFIX

logger = logging.getLogger(__name__)

STREAM_CHUNK_SIZE = 8192


class ConsoleLogger:
    """Production logger that prints to console (stdout/stderr)."""

    def info(self, message: str) -> None:
        """Print info message to stdout."""
        print(message)

    def warning(self, message: str) -> None:
        """Print warning message to stdout."""
        print(f"Warning: {message}")

    def error(self, message: str) -> None:
        """Print error message to stderr."""
        print(f"Error: {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        """Forward debug message to the logging module."""
        logger.debug(message)


class RealFileSystemService:
    """Production filesystem service using real pathlib and shutil operations."""

    def exists(self, path: Union[str, Path]) -> bool:
        """Check if path exists."""
        return Path(path).exists()

    def is_file(self, path: Union[str, Path]) -> bool:
        """Check if path is a file."""
        return Path(path).is_file()

    def read_file(self, path: Union[str, Path]) -> str:
        """Read entire file as string."""
        with open(path, 'r') as f:
            return f.read()

    def mkdir(self, path: Union[str, Path], parents: bool = True, exist_ok: bool = True) -> None:
        """Create directory."""
        Path(path).mkdir(parents=parents, exist_ok=exist_ok)

    def copy(self, source: Union[str, Path], destination: Union[str, Path]) -> None:
        """Copy a single file, preserving metadata."""
        shutil.copy2(source, destination)

    def walk_files(self, path: Union[str, Path]) -> Iterator[Path]:
        """Iterate over every regular file below path, in sorted order."""
        return (p for p in sorted(Path(path).rglob('*')) if p.is_file())

    def open(self, path: Union[str, Path], mode: str = 'r', buffering: int = -1) -> Any:
        """Open file and return file handle."""
        return open(path, mode, buffering=buffering)


class LocalProcessHandle:
    """Wrapper around subprocess.Popen that pumps output into a sink on join()."""

    def __init__(self, popen_handle, sink: Optional[BinaryIO]):
        """Initialize with actual subprocess.Popen object."""
        self._handle = popen_handle
        self._sink = sink

    def poll(self) -> Optional[int]:
        """Check if process has terminated."""
        return self._handle.poll()

    def join(self) -> int:
        """Copy remaining output to the sink and wait for the exit code."""
        pipe = self._handle.stdout
        if pipe is not None:
            for chunk in iter(lambda: pipe.read(STREAM_CHUNK_SIZE), b''):
                self._sink.write(chunk)
            pipe.close()
        return self._handle.wait()


class LocalProcessRunner:
    """Production process runner using real subprocess.Popen.

    stderr is merged into stdout; output goes to the given binary sink, or is
    inherited from this process when no sink is given.
    """

    def start(
        self,
        cmd: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        stdout: Optional[BinaryIO] = None,
        cwd: Optional[str] = None,
    ) -> LocalProcessHandle:
        """Start command and return process handle."""
        logger.debug("Spawning %s", ' '.join(cmd))
        handle = subprocess.Popen(
            list(cmd),
            stdout=subprocess.PIPE if stdout is not None else None,
            stderr=subprocess.STDOUT if stdout is not None else None,
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )
        return LocalProcessHandle(handle, stdout)

    def run(
        self,
        cmd: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        stdout: Optional[BinaryIO] = None,
        cwd: Optional[str] = None,
    ) -> int:
        """Execute command and wait for its exit code."""
        return self.start(cmd, env=env, stdout=stdout, cwd=cwd).join()


class BuildEnvironmentProvider:
    """Build variables layered over the real process environment."""

    def __init__(self, base_environ: Optional[Mapping[str, str]] = None):
        self._base = base_environ

    def resolve(self, build) -> Dict[str, str]:
        """Return os.environ (or the given base) overridden by build.variables."""
        environ = dict(os.environ if self._base is None else self._base)
        environ.update(build.variables or {})
        return environ


class WorkspaceArtifactSelector:
    """Selects the artifact from the build workspace by regular expression.

    The pattern must fully match either the path relative to the search
    root (POSIX separators) or the bare file name. Exactly one file may match.
    """

    def __init__(self, filesystem: RealFileSystemService):
        self.fs = filesystem

    def select(self, build, log, pattern: str, base_dir: Optional[str]) -> Path:
        root = Path(build.workspace)
        if base_dir:
            root = root / base_dir
        if not self.fs.exists(root):
            raise ArtifactSelectionError(f"Artifact directory {root} does not exist")

        regex = re.compile(pattern)
        matches = [
            path for path in self.fs.walk_files(root)
            if regex.fullmatch(path.relative_to(root).as_posix()) or regex.fullmatch(path.name)
        ]

        if not matches:
            raise ArtifactSelectionError(f"No artifact matching '{pattern}' found in {root}")
        if len(matches) > 1:
            names = ', '.join(str(m.relative_to(root)) for m in matches)
            raise ArtifactSelectionError(f"Several artifacts match '{pattern}' in {root}: {names}")

        log.info(f"{LOG_PREFIX}Selected artifact {matches[0]}")
        return matches[0]


class FtpTransferClient:
    """Uploads files with ftplib (binary mode)."""

    def __init__(self, ftp_factory=ftplib.FTP, timeout: float = 60.0):
        self._ftp_factory = ftp_factory
        self.timeout = timeout

    def transfer(self, config, log) -> None:
        """Store config.local_path as config.remote_path on config.host.

        Raises:
            TransferError: On any FTP or local I/O error
        """
        remote_dir, _, file_name = config.remote_path.rpartition('/')
        try:
            with self._ftp_factory(timeout=self.timeout) as ftp:
                logger.debug("Connecting to FTP host %s", config.host)
                ftp.connect(config.host)
                ftp.login(config.user or 'anonymous', config.password or '')
                if remote_dir:
                    ftp.cwd(remote_dir)
                with open(config.local_path, 'rb') as handle:
                    reply = ftp.storbinary(f"STOR {file_name}", handle)
                log.info(f"{LOG_PREFIX}FTP: {reply}")
        except ftplib.all_errors as e:
            raise TransferError(
                f"Unable to transfer {config.local_path} to {config.host}:{config.remote_path}: {e}"
            ) from e


class StaticTargetEnvironmentStore:
    """Target environments held in memory (loaded from configuration)."""

    def __init__(self, environments: Sequence[Any]):
        self._environments = list(environments)

    def all(self) -> List[Any]:
        return list(self._environments)


class WorkspaceFileStager:
    """Copies classpath entries into the build workspace, skip-if-exists."""

    def __init__(self, filesystem: RealFileSystemService):
        self.fs = filesystem

    def stage(self, build, paths: Sequence[str], log) -> None:
        for path in paths:
            source = Path(path)
            destination = Path(build.workspace) / source.name
            if self.fs.exists(destination):
                log.info(f"{LOG_PREFIX}file {source.name} already exists in workspace on node {build.node}.")
                continue
            log.info(f"{LOG_PREFIX}copying file {source.name} on node {build.node} ...")
            self.fs.copy(source, destination)


class YamlConfigLoader:
    """Production config loader using real YAML parser."""

    def __init__(self, filesystem: 'RealFileSystemService'):
        """Initialize with filesystem service for reading files."""
        self.fs = filesystem

    def load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file and return parsed dictionary."""
        content = self.fs.read_file(path)
        return yaml.safe_load(content)
