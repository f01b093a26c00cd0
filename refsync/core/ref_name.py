"""Ref name derivation — release name to fully qualified ref name.

Pure functions only.  The search pattern, flag letters and replacement
tokens follow the conventions pipeline task inputs are written in:

- flags ``g`` (replace every match), ``i``, ``m``, ``s`` and ``u``
- replacement tokens ``$$``, ``$&``, ``$``` (before the match), ``$'`` (after it),
  ``$1``..``$99`` and ``$<name>``; a numbered token beyond the pattern's
  groups stays literal text, and ``$10`` with one group reads as ``$1``
  followed by ``0``
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from refsync.config import InvalidConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_PATTERN = r"\s+"
DEFAULT_REGEX_FLAGS = "g"
DEFAULT_REPLACE_PATTERN = ""

_FLAG_BITS: dict[str, int] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
}

_REPLACEMENT_TOKEN = re.compile(r"\$(\$|&|`|'|\d{1,2}|<[^>]*>)")


def parse_flags(flags: str) -> tuple[int, bool]:
    """Translate flag letters into ``(re flags, replace_all)``.

    Raises ``InvalidConfigurationError`` on unknown or repeated letters.
    """
    bits = 0
    replace_all = False
    seen: set[str] = set()
    for letter in flags:
        if letter in seen:
            raise InvalidConfigurationError(f"Repeated regex flag: '{letter}'")
        seen.add(letter)
        if letter == "g":
            replace_all = True
        elif letter in _FLAG_BITS:
            bits |= _FLAG_BITS[letter]
        else:
            raise InvalidConfigurationError(
                f"Unsupported regex flag: '{letter}' in '{flags}'"
            )
    return bits, replace_all


def _group(index: int | str) -> Callable[[re.Match[str]], str]:
    return lambda m: m.group(index) or ""


def _numbered_token(
    digits: str, group_count: int
) -> list[str | Callable[[re.Match[str]], str]]:
    if len(digits) == 2 and 1 <= int(digits) <= group_count:
        return [_group(int(digits))]
    if 1 <= int(digits[0]) <= group_count:
        return [_group(int(digits[0])), digits[1:]]
    return ["$" + digits]


def compile_replacement(
    replace_pattern: str, pattern: re.Pattern[str]
) -> Callable[[re.Match[str]], str]:
    """Build the ``re.sub`` callable for a ``$``-style replacement.

    Tokens that do not name an existing group are kept as literal text;
    everything outside a token, backslashes included, is literal.
    """
    pieces: list[str | Callable[[re.Match[str]], str]] = []
    last = 0
    for match in _REPLACEMENT_TOKEN.finditer(replace_pattern):
        pieces.append(replace_pattern[last:match.start()])
        token = match.group(1)
        if token == "$":
            pieces.append("$")
        elif token == "&":
            pieces.append(_group(0))
        elif token == "`":
            pieces.append(lambda m: m.string[:m.start()])
        elif token == "'":
            pieces.append(lambda m: m.string[m.end():])
        elif token.startswith("<"):
            name = token[1:-1]
            if not pattern.groupindex:
                pieces.append(match.group(0))
            elif name in pattern.groupindex:
                pieces.append(_group(name))
        else:
            pieces.extend(_numbered_token(token, pattern.groups))
        last = match.end()
    pieces.append(replace_pattern[last:])

    def expand(m: re.Match[str]) -> str:
        return "".join(p if isinstance(p, str) else p(m) for p in pieces)

    return expand


def compile_search(search_pattern: str, flags: str) -> tuple[re.Pattern[str], bool]:
    """Compile *search_pattern* with *flags*, returning ``(pattern, replace_all)``."""
    bits, replace_all = parse_flags(flags)
    try:
        return re.compile(search_pattern, bits), replace_all
    except re.error as exc:
        raise InvalidConfigurationError(
            f"Invalid search regex '{search_pattern}': {exc}"
        ) from exc


def derive_ref_name(
    release_name: str,
    prefix: str,
    search_pattern: str = DEFAULT_SEARCH_PATTERN,
    replace_pattern: str = DEFAULT_REPLACE_PATTERN,
    flags: str = DEFAULT_REGEX_FLAGS,
) -> str:
    """Derive the ref name for *release_name*.

    Every match of *search_pattern* (only the first unless *flags*
    contains ``g``) is replaced with *replace_pattern*, and *prefix* is
    prepended to the result.

    >>> derive_ref_name("My Release 1", "refs/tags/")
    'refs/tags/MyRelease1'
    """
    logger.debug(
        "Search Regex: '%s', Replace Pattern: '%s', flags: '%s'",
        search_pattern,
        replace_pattern,
        flags,
    )
    pattern, replace_all = compile_search(search_pattern, flags)
    expand = compile_replacement(replace_pattern, pattern)
    replaced = pattern.sub(expand, release_name, count=0 if replace_all else 1)

    ref_name = f"{prefix}{replaced}"
    logger.debug("RefName: '%s'", ref_name)
    return ref_name
