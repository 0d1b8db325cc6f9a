"""Literal block codec for multi-line payloads embedded in scripts.

Payloads (the config JSON, the guide HTML) are emitted as PowerShell
single-quoted here-strings, which keep quotes, ``$`` and blank lines
verbatim. The only sequence a here-string cannot hold is its terminator,
``'@``, at the start of a line. When a payload contains one, every line that
starts with the terminator or with the ``|`` escape marker gets a ``|``
prefix, and the emitted code strips the marker again at run time.

Contract:
- Inputs: Variable name and payload text
- Outputs: PowerShell assignment text; decoded payload
- Side Effects: None
"""

import re

TERMINATOR = "'@"
ESCAPE_MARKER = "|"

_OPENER = re.compile(r"^\$(?P<name>\w+) = @'$")


def _strip_command(name: str) -> str:
    return f"${name} = ${name} -replace '(?m)^\\{ESCAPE_MARKER}', ''"


def _starts_with_terminator(line: str) -> bool:
    return line.lstrip().startswith(TERMINATOR)


def needs_escaping(payload: str) -> bool:
    return any(_starts_with_terminator(line) for line in payload.split("\n"))


def escape_lines(lines: list[str]) -> list[str]:
    return [ESCAPE_MARKER + line if line.startswith(ESCAPE_MARKER) or _starts_with_terminator(line) else line for line in lines]


def unescape_lines(lines: list[str]) -> list[str]:
    return [line[len(ESCAPE_MARKER) :] if line.startswith(ESCAPE_MARKER) else line for line in lines]


def encode_literal_block(name: str, payload: str) -> str:
    """Render ``$name = @' ... '@`` holding ``payload`` verbatim.

    Args:
        name: PowerShell variable name (without ``$``)
        payload: Text to embed

    Returns:
        PowerShell statements assigning the payload to ``$name``

    Example:
        >>> print(encode_literal_block("Note", "it's \\"quoted\\""))
        $Note = @'
        it's "quoted"
        '@
    """
    if not re.fullmatch(r"\w+", name):
        raise ValueError(f"Invalid variable name: {name!r}")

    lines = payload.split("\n")
    escaped = needs_escaping(payload)
    if escaped:
        lines = escape_lines(lines)

    block = [f"${name} = @'", *lines, TERMINATOR]
    if escaped:
        block.append(_strip_command(name))
    return "\n".join(block)


def decode_literal_block(text: str, name: str | None = None) -> str:
    """Recover the payload of a literal block.

    ``text`` may be the block alone or a whole script containing it. When
    ``name`` is given, the block assigning that variable is decoded;
    otherwise the first literal block found.

    Raises:
        ValueError: If no complete literal block is found
    """
    lines = text.split("\n")
    for start, line in enumerate(lines):
        match = _OPENER.match(line)
        if match and (name is None or match.group("name") == name):
            break
    else:
        raise ValueError(f"No literal block found for {name or 'any variable'}")

    var = match.group("name")
    for end in range(start + 1, len(lines)):
        if _starts_with_terminator(lines[end]):
            break
    else:
        raise ValueError(f"Literal block ${var} is not terminated")

    payload = lines[start + 1 : end]
    if end + 1 < len(lines) and lines[end + 1] == _strip_command(var):
        payload = unescape_lines(payload)
    return "\n".join(payload)
