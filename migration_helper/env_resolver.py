"""
Environment variable expansion for start-command arguments

Supports the three reference forms found in container specs and shell
command lines: $NAME, ${NAME} and $(NAME).
"""
import re
from typing import List, Mapping

# One alternative per reference form; exactly one name group matches
VARIABLE_REF_RE = re.compile(
    r'\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}'
    r'|\((?P<paren>[A-Za-z_][A-Za-z0-9_]*)\)'
    r'|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))'
)


def _ref_name(match: re.Match) -> str:
    return match.group('braced') or match.group('paren') or match.group('bare')


def resolve_env(value: str, env: Mapping[str, str]) -> str:
    """Replace variable references whose name is declared in env.

    Substitution is a single pass over the input, so text introduced by a
    substituted value is never expanded again. References to names absent
    from env are kept verbatim, delimiters included.

    Args:
        value: String possibly containing variable references
        env: Declared environment (variable name -> value)

    Returns:
        The resolved string
    """
    def _replace(match):
        name = _ref_name(match)
        if name in env:
            return env[name]
        return match.group(0)

    return VARIABLE_REF_RE.sub(_replace, value)


def find_unresolved(value: str, env: Mapping[str, str]) -> List[str]:
    """Names referenced in value that env does not declare, in order of appearance"""
    names = []
    for match in VARIABLE_REF_RE.finditer(value):
        name = _ref_name(match)
        if name not in env and name not in names:
            names.append(name)
    return names
