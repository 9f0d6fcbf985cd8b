"""Parser for the href URI templates of links.

Only simple variable substitution is supported, plus the {(...)} operator
which escapes a $ref pointer so it can be used as a variable:

    /spells/{(#/definitions/spell/definitions/name)}

The pointer is percent-encoded while scanning, then decoded back when
variables are extracted.
"""

from collections.abc import Callable

from hyperroutes.errors import MalformedTemplateError
from hyperroutes.naming import ref_path_name

# Historical token for an empty (...) block: "empty" with its "e" escaped.
EMPTY_VAR_TOKEN = "%65mpty"

# Route names use this in place of every variable.
NAME_VAR_TOKEN = "one"

_UNRESERVED = frozenset(b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_.")
_HEX = frozenset("0123456789abcdefABCDEF")


def rfc6570_escape(data: bytes) -> str:
    """Percent-encode every byte except ASCII alphanumerics, '_' and '.'."""
    return "".join(chr(b) if b in _UNRESERVED else f"%{b:02X}" for b in data)


def percent_decode(s: str) -> str:
    """Strictly decode %XX sequences. Raises ValueError on malformed input."""
    out = bytearray()
    i = 0
    while i < len(s):
        c = s[i]
        if ord(c) > 0x7F:
            raise ValueError("non-ASCII char detected")
        if c != "%":
            out.append(ord(c))
            i += 1
            continue
        seq = s[i + 1:i + 3]
        if len(seq) < 2:
            raise ValueError("unexpected end of unescape sequence")
        if not all(h in _HEX for h in seq):
            raise ValueError(f"invalid char in unescape sequence %{seq}")
        out.append(int(seq, 16))
        i += 3
    return out.decode("utf-8")


def preprocess_var(token: str) -> str:
    """Escape the (...) blocks of a {...} variable token.

    Inside a block, "))" stands for a literal ")".
    """
    if len(token) < 2 or token[0] != "{" or token[-1] != "}":
        return token
    inner = token[1:-1]
    buf: list[str] = []
    esc: list[str] = []
    in_esc = False
    i = 0
    while i < len(inner):
        c = inner[i]
        i += 1
        if c == "(":
            if in_esc:
                esc.append(c)
            else:
                in_esc = True
        elif c == ")" and in_esc:
            if inner[i:i + 1] == ")":
                esc.append(")")
                i += 1
                continue
            in_esc = False
            escaped = rfc6570_escape("".join(esc).encode("utf-8"))
            esc.clear()
            buf.append(escaped or EMPTY_VAR_TOKEN)
        elif in_esc:
            esc.append(c)
        else:
            buf.append(c)
    return "{" + "".join(buf) + "}"


def map_href_vars(href: str, var_func: Callable[[str], str]) -> str:
    """Replace each {...} variable of href with var_func(preprocessed token)."""
    out: list[str] = []
    var: list[str] = []
    in_var = False
    for c in href:
        if c == "{":
            if in_var:
                raise MalformedTemplateError(href, "found opening { while already in a var")
            in_var = True
            var.append(c)
        elif c == "}":
            if not in_var:
                raise MalformedTemplateError(href, "found closing } while not in a var")
            in_var = False
            var.append(c)
            out.append(var_func(preprocess_var("".join(var))))
            var.clear()
        elif in_var:
            var.append(c)
        else:
            out.append(c)
    if in_var:
        raise MalformedTemplateError(href, "unterminated var")
    return "".join(out)


def _decode_var(href: str, token: str) -> str:
    try:
        return percent_decode(token[1:-1])
    except ValueError as e:
        raise MalformedTemplateError(href, str(e)) from e


def vars_from_href(href: str) -> list[str]:
    """Variables of href, decoded: pointers come back as "#/definitions/..."."""
    variables: list[str] = []

    def collect(token: str) -> str:
        variables.append(_decode_var(href, token))
        return ""

    map_href_vars(href, collect)
    return variables


def href_to_path(href: str) -> str:
    """Route path of href: "/spells/{(#/definitions/spell/definitions/name)}" -> "/spells/{spell-name}"."""
    return map_href_vars(href, lambda token: "{" + ref_path_name(_decode_var(href, token)) + "}")


def href_to_name(href: str) -> str:
    """Dotted route name of href: "/spells/{id}" -> "spells.one"."""
    name = map_href_vars(href, lambda token: NAME_VAR_TOKEN)
    if name.startswith("/"):
        name = name[1:]
    return name.replace("/", ".")


def extract_path_and_variables(href: str) -> tuple[str, list[str]]:
    return href_to_path(href), vars_from_href(href)
