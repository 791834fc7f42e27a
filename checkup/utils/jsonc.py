"""JSON with comments (tsconfig.json/jsconfig.json flavour).

Strips `//` and `/* */` comments and trailing commas outside of string
literals, then hands the text to the json module.
"""
import json
from typing import Any


def strip_comments(text: str) -> str:
    """Remove comments, keeping string literals intact."""
    out = []
    i, length = 0, len(text)
    in_string = False

    while i < length:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == '\\' and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith('//', i):
            end = text.find('\n', i)
            i = length if end == -1 else end
        elif text.startswith('/*', i):
            end = text.find('*/', i + 2)
            i = length if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1

    return ''.join(out)


def strip_trailing_commas(text: str) -> str:
    """Drop commas directly followed (modulo whitespace) by `}` or `]`."""
    out = []
    i, length = 0, len(text)
    in_string = False

    while i < length:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == '\\' and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif ch == ',':
            j = i + 1
            while j < length and text[j] in ' \t\r\n':
                j += 1
            if j >= length or text[j] not in '}]':
                out.append(ch)
        else:
            out.append(ch)
        i += 1

    return ''.join(out)


def loads(text: str) -> Any:
    """Parse JSONC text.

    Raises:
        json.JSONDecodeError: If the text is not valid even after cleanup
    """
    return json.loads(strip_trailing_commas(strip_comments(text)))
