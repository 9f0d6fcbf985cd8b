"""Helpers turning refs, hrefs and route names into symbol names."""

SYMBOL_SEPARATORS = ".-_ "

DEFINITIONS_PREFIX = "#/definitions/"


def capitalize(s: str) -> str:
    return s[:1].upper() + s[1:]


def to_upper_after_any(s: str, chars: str) -> str:
    """Drop every char found in chars and upper-case the one following it."""
    out = []
    upnext = False
    for c in s:
        if c in chars:
            upnext = True
            continue
        if upnext:
            out.append(c.upper())
            upnext = False
            continue
        out.append(c)
    return "".join(out)


def symbol_name(s: str) -> str:
    """CamelCase s on '.', '-', '_' and space: "spell-name" -> "SpellName"."""
    return capitalize(to_upper_after_any(s, SYMBOL_SEPARATORS))


def ref_path_name(ref: str) -> str:
    """Hyphenated name of a ref: "#/definitions/spell/definitions/name" -> "spell-name"."""
    name = ref.replace(DEFINITIONS_PREFIX, "", 1)
    return name.replace("/definitions/", "-")


def ref_type_name(ref: str) -> str:
    return symbol_name(ref_path_name(ref))


def param_varname(name: str) -> str:
    """Identifier for a route param: "spell-name" -> "spellName"."""
    return to_upper_after_any(name, "-")


def handler_func_name(method: str, route_name: str) -> str:
    """Name of the handler for a route: ("GET", "spells.one") -> "getSpellsOne"."""
    return method.lower() + symbol_name(route_name)
