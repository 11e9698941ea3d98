"""Token substitution for custom deployer command lines.

A custom command line is a ``;``-separated list of weblogic.Deployer argument
strings that may reference ``{wl.<key>}`` tokens, e.g.::

    -name {wl.deployment_name} -targets {wl.targets} -adminurl {wl.admin_url} -start

Tokens whose key cannot be resolved are copied through unchanged, braces
included. A fragment is split into arguments before substitution, so a value
containing spaces or quotes always stays a single argument.
"""
import re
import shlex
from typing import Callable, Dict, List, Optional

from .command import admin_url
from .models import DeployerParameters

COMMAND_LINE_SEPARATOR = ';'
TOKEN_PATTERN = re.compile(r'\{([^{}\s]+)\}')
TOKEN_PREFIX = 'wl.'


class DeployerTokenResolver:
    """Resolves ``wl.*`` keys against a DeployerParameters bundle."""

    _RESOLVERS: Dict[str, Callable[[DeployerParameters], Optional[object]]] = {
        'deployment_name': lambda p: p.deployment_name,
        'artifact_name': lambda p: p.artifact_name,
        'source': lambda p: p.source,
        'targets': lambda p: p.deployment_targets,
        'host': lambda p: p.environment.host,
        'port': lambda p: p.environment.port,
        'protocol': lambda p: p.protocol or p.environment.protocol,
        'admin_url': admin_url,
        'login': lambda p: p.environment.login,
        'password': lambda p: p.environment.password,
        'remote_dir': lambda p: p.environment.remote_dir,
        'stage_mode': lambda p: p.stage_mode.value,
        'deployment_plan': lambda p: p.deployment_plan,
        'java_home': lambda p: p.toolchain.home,
    }

    def resolve_key(self, key: str, params: DeployerParameters) -> Optional[str]:
        """Return the value for a ``wl.``-prefixed key, or None if unknown/unset."""
        if not key.startswith(TOKEN_PREFIX):
            return None
        resolver = self._RESOLVERS.get(key[len(TOKEN_PREFIX):])
        if resolver is None:
            return None
        value = resolver(params)
        return None if value is None else str(value)


def replace_tokens(text: str, params: DeployerParameters,
                   resolver: Optional[DeployerTokenResolver] = None) -> str:
    """Substitute every resolvable token in text in a single left-to-right pass.

    Substituted values are not rescanned, so a value containing ``{...}``
    is emitted literally.
    """
    resolver = resolver or DeployerTokenResolver()
    output = []
    cursor = 0
    for match in TOKEN_PATTERN.finditer(text):
        output.append(text[cursor:match.start()])
        value = resolver.resolve_key(match.group(1), params)
        output.append(match.group(0) if value is None else value)
        cursor = match.end()
    output.append(text[cursor:])
    return ''.join(output)


def tokenize_command(fragment: str, params: DeployerParameters,
                     resolver: Optional[DeployerTokenResolver] = None) -> List[str]:
    """Split fragment with shell rules, then substitute tokens in each argument."""
    resolver = resolver or DeployerTokenResolver()
    return [replace_tokens(arg, params, resolver) for arg in shlex.split(fragment)]


def split_command_line(command_line: Optional[str]) -> List[str]:
    """Split a custom command line into its non-blank, stripped fragments."""
    if not command_line:
        return []
    return [fragment.strip() for fragment in command_line.split(COMMAND_LINE_SEPARATOR)
            if fragment.strip()]
