"""Core dependency injection infrastructure for wldeploy.

This module provides Protocol-based abstractions for every external
collaborator of the deployment orchestrator (filesystem, processes, JDK
lookup, artifact selection, FTP, environment) together with their production
implementations.

Design:
- Protocol-based abstractions (typing.Protocol) for structural typing
- Production implementations for real-world use
- Easy mocking for unit tests
"""

from wldeploy.core.protocols import (
    Logger,
    FileSystemService,
    ProcessRunner,
    ProcessHandle,
    EnvironmentProvider,
    ToolchainService,
    ArtifactSelector,
    FileTransferClient,
    TargetEnvironmentStore,
    RemoteFileStager,
    ConfigLoader,
)

from wldeploy.core.implementations import (
    ConsoleLogger,
    RealFileSystemService,
    LocalProcessRunner,
    BuildEnvironmentProvider,
    WorkspaceArtifactSelector,
    FtpTransferClient,
    StaticTargetEnvironmentStore,
    WorkspaceFileStager,
    YamlConfigLoader,
)

__all__ = [
    # Protocols
    "Logger",
    "FileSystemService",
    "ProcessRunner",
    "ProcessHandle",
    "EnvironmentProvider",
    "ToolchainService",
    "ArtifactSelector",
    "FileTransferClient",
    "TargetEnvironmentStore",
    "RemoteFileStager",
    "ConfigLoader",
    # Implementations
    "ConsoleLogger",
    "RealFileSystemService",
    "LocalProcessRunner",
    "BuildEnvironmentProvider",
    "WorkspaceArtifactSelector",
    "FtpTransferClient",
    "StaticTargetEnvironmentStore",
    "WorkspaceFileStager",
    "YamlConfigLoader",
]
