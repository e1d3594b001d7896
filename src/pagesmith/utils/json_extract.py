from enum import Enum, auto


class _ScanState(Enum):
    NORMAL = auto()
    IN_STRING = auto()
    ESCAPED = auto()


def extract_first_json_object(raw: str | None) -> str | None:
    """
    Returns the first balanced ``{...}`` substring of ``raw``, or None.

    This is a brace matcher, not a JSON parser: only double quotes open a string, a
    backslash inside a string escapes the next character, and braces inside strings do
    not count towards depth. Whatever sits between the braces is returned as-is.
    """
    if not raw:
        return None

    start = raw.find("{")
    if start < 0:
        return None

    depth = 0
    state = _ScanState.NORMAL
    for i in range(start, len(raw)):
        ch = raw[i]
        if state is _ScanState.ESCAPED:
            state = _ScanState.IN_STRING
        elif state is _ScanState.IN_STRING:
            if ch == "\\":
                state = _ScanState.ESCAPED
            elif ch == '"':
                state = _ScanState.NORMAL
        elif ch == '"':
            state = _ScanState.IN_STRING
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return raw[start : i + 1]

    # unterminated object
    return None
