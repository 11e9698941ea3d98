"""Build variable helpers: macro expansion and boolean parsing."""
import re
from typing import Mapping, Optional

# $VAR or ${VAR}
VARIABLE_PATTERN = re.compile(r'\$(?:([A-Za-z0-9_]+)|\{([A-Za-z0-9_.]+)\})')

TRUE_STRINGS = frozenset({'true', 'yes', 'on', 'y', 't'})
FALSE_STRINGS = frozenset({'false', 'no', 'off', 'n', 'f'})


def expand_env_vars(text: Optional[str], env: Optional[Mapping[str, str]]) -> Optional[str]:
    """Replace $VAR / ${VAR} references with values from env.

    Unknown variables are left verbatim. None and empty strings pass through.

    Example:
        expand_env_vars("${CLUSTER},AdminServer", {"CLUSTER": "c1"})  # "c1,AdminServer"
    """
    if not text or not env:
        return text

    def _substitute(match: re.Match) -> str:
        key = match.group(1) or match.group(2)
        value = env.get(key)
        return match.group(0) if value is None else value

    return VARIABLE_PATTERN.sub(_substitute, text)


def to_boolean(value: Optional[str]) -> bool:
    """Parse a flag value the way build variables are usually written."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_STRINGS
