"""Configuration loading from YAML.

Example file::

    deployer:
      java_opts: "-Xms256m -Xmx512m"
      extra_classpath: "/opt/oracle/wlserver/server/lib/weblogic.jar"
      excluded_artifact_name_pattern: ".*-sources"
      tolerate_undeploy_failure: false
      log_dir: deployment-logs
      min_java_version: "1.8"
    jdks:
      - name: jdk8
        home: /usr/lib/jvm/java-8-openjdk
    environments:
      - name: prod
        host: wls-admin.example.com
        port: 7001
        login: weblogic
        password: secret
        remote_dir: /u01/shared-libs
    tasks:
      - id: "1"
        task_name: shop
        built_resource_regex_to_deploy: ".*\\.war"
        target_environment_name: prod
        deployment_name: shop
"""
import logging
import re
import yaml
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from wldeploy.core.protocols import ConfigLoader
from wldeploy.deploy.exceptions import ConfigurationError
from wldeploy.deploy.models import DeployerConfig, DeploymentTask, StageMode, TargetEnvironment
from wldeploy.utils.variables import FALSE_STRINGS, TRUE_STRINGS, to_boolean

logger = logging.getLogger(__name__)

_TASK_REQUIRED = ('id', 'task_name', 'built_resource_regex_to_deploy',
                  'target_environment_name', 'deployment_name')
_ENVIRONMENT_REQUIRED = ('name', 'host', 'port')


@dataclass
class AppConfig:
    """Top-level configuration."""

    deployer: DeployerConfig = field(default_factory=DeployerConfig)
    jdks: Dict[str, str] = field(default_factory=dict)
    environments: List[TargetEnvironment] = field(default_factory=list)
    tasks: List[DeploymentTask] = field(default_factory=list)

    def find_task(self, name: str) -> Optional[DeploymentTask]:
        for task in self.tasks:
            if task.task_name == name:
                return task
        return None


def _section(payload: Dict[str, Any], key: str, kind: type):
    value = payload.get(key)
    if value is None:
        return kind()
    if not isinstance(value, kind):
        raise ConfigurationError(f"'{key}' must be a {kind.__name__}, got {type(value).__name__}")
    return value


def _check_keys(entry: Any, required, what: str, allowed) -> None:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Each {what} entry must be a mapping")
    missing = [key for key in required if entry.get(key) in (None, '')]
    if missing:
        raise ConfigurationError(f"{what} entry {entry.get(required[0])!r} is missing: {', '.join(missing)}")
    unknown = sorted(set(entry) - set(allowed))
    if unknown:
        raise ConfigurationError(f"{what} entry {entry.get(required[0])!r} has unknown keys: {', '.join(unknown)}")


def _without_nulls(entry: Dict[str, Any]) -> Dict[str, Any]:
    """Drop null values so the dataclass field defaults apply."""
    return {key: value for key, value in entry.items() if value is not None}


def _flag(value: Any, what: str) -> bool:
    """Parse a YAML boolean, accepting the usual quoted spellings."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in TRUE_STRINGS | FALSE_STRINGS:
        return to_boolean(value)
    raise ConfigurationError(f"{what} must be a boolean, got {value!r}")


def parse_deployer(payload: Dict[str, Any]) -> DeployerConfig:
    allowed = {f.name for f in fields(DeployerConfig)}
    unknown = sorted(set(payload) - allowed)
    if unknown:
        raise ConfigurationError(f"Unknown deployer settings: {', '.join(unknown)}")
    payload = _without_nulls(payload)

    pattern = payload.get('excluded_artifact_name_pattern')
    try:
        compiled = re.compile(pattern) if pattern else None
    except re.error as e:
        raise ConfigurationError(f"Invalid excluded_artifact_name_pattern {pattern!r}: {e}") from e

    defaults = DeployerConfig()
    return DeployerConfig(
        java_opts=payload.get('java_opts', defaults.java_opts),
        extra_classpath=payload.get('extra_classpath', defaults.extra_classpath),
        excluded_artifact_name_pattern=compiled,
        tolerate_undeploy_failure=_flag(payload.get('tolerate_undeploy_failure'), 'tolerate_undeploy_failure'),
        log_dir=Path(payload.get('log_dir', defaults.log_dir)),
        min_java_version=str(payload.get('min_java_version', defaults.min_java_version)),
    )


def parse_environment(entry: Dict[str, Any]) -> TargetEnvironment:
    _check_keys(entry, _ENVIRONMENT_REQUIRED, 'environment', {f.name for f in fields(TargetEnvironment)})
    try:
        port = int(entry['port'])
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"environment {entry['name']!r} has an invalid port: {entry['port']!r}") from e
    return TargetEnvironment(**{**_without_nulls(entry), 'name': str(entry['name']), 'port': port})


def parse_task(entry: Dict[str, Any]) -> DeploymentTask:
    _check_keys(entry, _TASK_REQUIRED, 'task', {f.name for f in fields(DeploymentTask)})
    try:
        stage_mode = StageMode.parse(entry.get('stage_mode'))
    except ValueError as e:
        raise ConfigurationError(f"task {entry['task_name']!r}: {e}") from e

    targets = entry.get('deployment_targets')
    if targets is not None and not str(targets).strip():
        raise ConfigurationError(f"task {entry['task_name']!r}: deployment_targets must not be blank")

    return DeploymentTask(**{
        **_without_nulls(entry),
        'id': str(entry['id']),
        'is_library': _flag(entry.get('is_library'), f"task {entry['task_name']!r}: is_library"),
        'stage_mode': stage_mode,
    })


def parse_config(payload: Optional[Dict[str, Any]]) -> AppConfig:
    """Build an AppConfig from a parsed YAML document.

    Raises:
        ConfigurationError: If a section or entry is malformed
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    jdks = {}
    for entry in _section(payload, 'jdks', list):
        _check_keys(entry, ('name', 'home'), 'jdk', {'name', 'home'})
        jdks[str(entry['name'])] = str(entry['home'])

    config = AppConfig(
        deployer=parse_deployer(_section(payload, 'deployer', dict)),
        jdks=jdks,
        environments=[parse_environment(e) for e in _section(payload, 'environments', list)],
        tasks=[parse_task(t) for t in _section(payload, 'tasks', list)],
    )

    task_ids = [t.id for t in config.tasks]
    duplicates = sorted({i for i in task_ids if task_ids.count(i) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate task ids: {', '.join(duplicates)}")
    return config


def load_config(path: str, loader: ConfigLoader) -> AppConfig:
    """Load and validate the configuration file at path."""
    logger.debug("Loading configuration from %s", path)
    try:
        payload = loader.load_yaml(path)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    return parse_config(payload)
