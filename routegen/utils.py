import keyword
import re
import unicodedata

__all__ = (
    'literal_text',
    'remove_suffix',
    'sanitize_parameter_name',
)

_QUOTED_LITERAL = re.compile(r'''^(?P<quote>['"])(?P<text>.*)(?P=quote)$''', re.DOTALL)


def remove_accents(input_str):
    nfkd_form = unicodedata.normalize('NFKD', input_str)
    return ''.join(c for c in nfkd_form if not unicodedata.combining(c))


def sanitize_name_python_keywords(name: str) -> str:
    if name in keyword.kwlist:
        return f'{name}_'
    return name


def sanitize_parameter_name(name: str) -> str:
    """Sanitize a parameter name to be a valid Python identifier.

    - Append an underscore to Python keywords
    - Replace spaces and hyphens with underscores
    - Remove other invalid characters
    - Ensure it doesn't start with a digit
    """
    if not name:
        raise ValueError('Name cannot be empty')

    sanitized = sanitize_name_python_keywords(name)
    sanitized = re.sub(r'[-\s]+', '_', remove_accents(sanitized))
    sanitized = re.sub(r'[^A-Za-z0-9_]', '', sanitized)

    if sanitized and sanitized[0].isdigit():
        sanitized = '_' + sanitized
    return sanitized


def literal_text(source: str) -> str | None:
    """Return the text between matching quote markers, or None if not a literal."""
    match = _QUOTED_LITERAL.match(source.strip())
    if match is None:
        return None
    return match.group('text')


def remove_suffix(name: str, suffix: str) -> str:
    if suffix and name.endswith(suffix):
        return name[: -len(suffix)]
    return name
