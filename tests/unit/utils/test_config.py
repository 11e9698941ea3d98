"""Unit tests for YAML configuration loading."""

import re
from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml

from wldeploy.core.protocols import ConfigLoader
from wldeploy.deploy import ConfigurationError, StageMode
from wldeploy.utils.config import load_config, parse_config


def minimal_payload():
    return {
        'jdks': [{'name': 'jdk8', 'home': '/opt/jdk8'}],
        'environments': [{'name': 'prod', 'host': 'wls.example.com', 'port': 7001}],
        'tasks': [{
            'id': 1,
            'task_name': 'shop',
            'built_resource_regex_to_deploy': r'.*\.war',
            'target_environment_name': 'prod',
            'deployment_name': 'shop',
        }],
    }


class TestParseConfig:

    def test_minimal_configuration(self):
        config = parse_config(minimal_payload())

        assert config.jdks == {'jdk8': '/opt/jdk8'}
        assert config.environments[0].port == 7001
        assert config.environments[0].protocol == 't3'
        task = config.tasks[0]
        assert task.id == '1'
        assert task.deployment_targets == 'AdminServer'
        assert task.stage_mode is StageMode.BY_DEFAULT
        assert not task.is_library
        assert config.deployer.excluded_artifact_name_pattern is None
        assert not config.deployer.tolerate_undeploy_failure

    def test_empty_document(self):
        config = parse_config(None)

        assert config.tasks == []
        assert config.jdks == {}

    def test_deployer_section(self):
        payload = minimal_payload()
        payload['deployer'] = {
            'java_opts': '-Xmx512m',
            'extra_classpath': '/opt/wls/weblogic.jar',
            'excluded_artifact_name_pattern': '.*-sources',
            'tolerate_undeploy_failure': True,
            'log_dir': '/var/log/deploy',
            'min_java_version': 1.8,
        }

        deployer = parse_config(payload).deployer

        assert deployer.java_opts == '-Xmx512m'
        assert deployer.excluded_artifact_name_pattern == re.compile('.*-sources')
        assert deployer.tolerate_undeploy_failure
        assert deployer.log_dir == Path('/var/log/deploy')
        assert deployer.min_java_version == '1.8'

    def test_task_options(self):
        payload = minimal_payload()
        payload['tasks'][0].update({
            'is_library': True,
            'stage_mode': 'nostage',
            'deployment_targets': '${CLUSTER}',
            'command_line': '-listapps',
        })

        task = parse_config(payload).tasks[0]

        assert task.is_library
        assert task.stage_mode is StageMode.NOSTAGE
        assert task.deployment_targets == '${CLUSTER}'
        assert task.is_custom

    @pytest.mark.parametrize("value,expected", [
        (True, True),
        (False, False),
        ("true", True),
        ("false", False),
        ("No", False),
        ("yes", True),
        (None, False),
    ])
    def test_boolean_settings_accept_quoted_values(self, value, expected):
        payload = minimal_payload()
        payload['deployer'] = {'tolerate_undeploy_failure': value}
        payload['tasks'][0]['is_library'] = value

        config = parse_config(payload)

        assert config.deployer.tolerate_undeploy_failure is expected
        assert config.tasks[0].is_library is expected

    @pytest.mark.parametrize("value", ["maybe", 1, [True]])
    def test_boolean_settings_reject_other_values(self, value):
        payload = minimal_payload()
        payload['tasks'][0]['is_library'] = value

        with pytest.raises(ConfigurationError, match="is_library must be a boolean"):
            parse_config(payload)

    def test_null_values_fall_back_to_defaults(self):
        payload = minimal_payload()
        payload['tasks'][0].update(deployment_targets=None, stage_mode=None, command_line=None)
        payload['environments'][0]['protocol'] = None
        payload['deployer'] = {'log_dir': None, 'min_java_version': None}

        config = parse_config(payload)

        assert config.tasks[0].deployment_targets == 'AdminServer'
        assert config.tasks[0].stage_mode is StageMode.BY_DEFAULT
        assert config.environments[0].protocol == 't3'
        assert config.deployer.log_dir == Path('deployment-logs')
        assert config.deployer.min_java_version == '1.6'

    def test_blank_deployment_targets_rejected(self):
        payload = minimal_payload()
        payload['tasks'][0]['deployment_targets'] = '  '

        with pytest.raises(ConfigurationError, match="deployment_targets must not be blank"):
            parse_config(payload)

    def test_find_task(self):
        config = parse_config(minimal_payload())

        assert config.find_task('shop') is config.tasks[0]
        assert config.find_task('other') is None

    @pytest.mark.parametrize("mutate,message", [
        (lambda p: p['tasks'][0].pop('deployment_name'), "missing: deployment_name"),
        (lambda p: p['tasks'][0].update(colour='blue'), "unknown keys: colour"),
        (lambda p: p['tasks'][0].update(stage_mode='always'), "Unknown stage mode"),
        (lambda p: p['tasks'].append(dict(p['tasks'][0])), "Duplicate task ids: 1"),
        (lambda p: p['environments'][0].update(port='http'), "invalid port"),
        (lambda p: p['environments'][0].pop('host'), "missing: host"),
        (lambda p: p['jdks'][0].pop('home'), "missing: home"),
        (lambda p: p.update(tasks={'shop': {}}), "'tasks' must be a list"),
        (lambda p: p.update(deployer={'javaopts': '-Xmx1g'}), "Unknown deployer settings: javaopts"),
        (lambda p: p.update(deployer={'excluded_artifact_name_pattern': '(*'}), "Invalid excluded_artifact_name_pattern"),
    ])
    def test_invalid_configuration(self, mutate, message):
        payload = minimal_payload()
        mutate(payload)

        with pytest.raises(ConfigurationError, match=re.escape(message)):
            parse_config(payload)

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            parse_config(['tasks'])


class TestLoadConfig:

    def setup_method(self):
        self.loader = Mock(spec=ConfigLoader)

    def test_loads_through_loader(self):
        self.loader.load_yaml.return_value = minimal_payload()

        config = load_config('deploy.yaml', self.loader)

        self.loader.load_yaml.assert_called_once_with('deploy.yaml')
        assert config.tasks[0].task_name == 'shop'

    def test_missing_file(self):
        self.loader.load_yaml.side_effect = FileNotFoundError('deploy.yaml')

        with pytest.raises(ConfigurationError, match="Cannot read configuration file"):
            load_config('deploy.yaml', self.loader)

    def test_invalid_yaml(self):
        self.loader.load_yaml.side_effect = yaml.YAMLError('bad indent')

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config('deploy.yaml', self.loader)
