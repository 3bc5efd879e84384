"""
Start-command argument parser

Turns the argument list of the legacy database container into a
ParsedArgs structure: typed ports, the resolved join list and the
pass-through flags the operator should keep setting.
"""
import re
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .constants import (
    CERTS_DIR_FLAG,
    EXCLUDED_FLAGS,
    HTTP_PORT_FLAG,
    INSECURE_FLAG,
    INT32_MAX,
    INT32_MIN,
    JOIN_FLAG,
    LOCALITY_FLAG,
    PORT_FLAG,
)
from .env_resolver import find_unresolved, resolve_env
from .errors import ParseError
from .logger import log_warning
from .models import ParsedArgs

INT32_RE = re.compile(r'^[+-]?[0-9]+$')

# Value stored for flags given without '=value'
BOOLEAN_FLAG_VALUE = 'true'


def parse_int32(value: str, flag: str = 'value') -> int:
    """Parse a base-10 signed 32-bit integer.

    Args:
        value: Raw string (optional sign followed by decimal digits)
        flag: Flag name reported in the error

    Returns:
        The parsed integer

    Raises:
        ParseError: If value is not decimal or does not fit in 32 bits
    """
    if not INT32_RE.match(value):
        raise ParseError(flag, value)
    num = int(value, 10)
    if num < INT32_MIN or num > INT32_MAX:
        raise ParseError(flag, value, 'out of 32-bit range')
    return num


def parse_port(value: str, flag: str) -> int:
    """Parse a port flag value; ports are 32-bit and never negative"""
    port = parse_int32(value, flag)
    if port < 0:
        raise ParseError(flag, value, 'port must not be negative')
    return port


def split_flag(arg: str) -> Tuple[str, str, bool]:
    """Split '--name=value' on the first '='.

    Returns:
        (name, value, has_value); bare flags return ('--name', '', False)
    """
    if '=' in arg:
        name, value = arg.split('=', 1)
        return name, value, True
    return arg, '', False


def extract_start_args(container: Dict[str, Any]) -> List[str]:
    """Tokenize the start command of a container.

    The public chart runs the database through a shell, e.g.
    ["shell", "-ecx", "exec /cockroach/cockroach start --join=... --port=26257"],
    so every command/args element is split on whitespace. Values are not
    unquoted; '%', '$' and parentheses survive as-is.

    Args:
        container: Container spec from the StatefulSet pod template

    Returns:
        Flat list of tokens in command order
    """
    tokens = []
    for part in (container.get('command') or []) + (container.get('args') or []):
        tokens.extend(part.split())
    return tokens


def parse_start_args(args: Sequence[str], env: Mapping[str, str]) -> ParsedArgs:
    """Parse start arguments into ports, join list and pass-through flags.

    Tokens that are not '--' flags (shell words, the binary path, the
    'start' sub-command) are skipped. Values are resolved against env; any
    reference left unresolved is kept verbatim and reported as a warning.

    Args:
        args: Argument tokens, e.g. from extract_start_args
        env: Declared container environment

    Returns:
        ParsedArgs with ports defaulted where the flags are absent

    Raises:
        ParseError: If --port or --http-port is not a valid port number
    """
    parsed = ParsedArgs()
    port_seen = False

    for arg in args:
        if not arg.startswith('--'):
            continue
        name, value, has_value = split_flag(arg)

        if name == JOIN_FLAG:
            parsed.join_cmd = _resolve(name, value, env)
        elif name == PORT_FLAG:
            parsed.sql_port = parse_port(value, name)
            port_seen = True
        elif name == HTTP_PORT_FLAG:
            parsed.http_port = parse_port(value, name)
        elif name == INSECURE_FLAG:
            parsed.insecure = not has_value or value.lower() != 'false'
        elif name == CERTS_DIR_FLAG:
            parsed.certs_dir = value
        elif name == LOCALITY_FLAG:
            parsed.locality = _resolve(name, value, env)
        elif name in EXCLUDED_FLAGS:
            continue
        else:
            parsed.flags[name] = _resolve(name, value, env) if has_value else BOOLEAN_FLAG_VALUE

    # The legacy chart serves gRPC and SQL on one port; the operator uses a
    # dedicated gRPC port right after the SQL port
    if port_seen:
        if parsed.sql_port + 1 > INT32_MAX:
            raise ParseError(PORT_FLAG, str(parsed.sql_port), 'derived gRPC port overflows 32 bits')
        parsed.grpc_port = parsed.sql_port + 1

    return parsed


def parse_locality_labels(locality: str) -> Tuple[str, ...]:
    """Keys of a 'k1=v1,k2=v2' locality string, in their original order"""
    labels = []
    for tier in locality.split(','):
        tier = tier.strip()
        if not tier:
            continue
        key = tier.split('=', 1)[0].strip()
        if key:
            labels.append(key)
    return tuple(labels)


def _resolve(flag: str, value: str, env: Mapping[str, str]) -> str:
    unresolved = find_unresolved(value, env)
    if unresolved:
        log_warning(
            f"{flag}: no declared value for {', '.join(unresolved)}; "
            f"keeping the reference verbatim"
        )
    return resolve_env(value, env)
