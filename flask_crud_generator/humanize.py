"""
Humanize filters

Two Jinja2 filters, ``humanize_lc`` and ``humanize_uc``. Both split camelCase
and snake_case strings on their uppercase letters and "_" characters to form
a more human readable sentence.

The _lc variant returns every word of the sentence in lower case. The _uc
variant does the same, except the first letter of the sentence is uppercase.

    >>> humanize_lc("firstName")
    'first name'
    >>> humanize_uc("first_name")
    'First name'
"""

import re

UPPERCASE_PATTERN = re.compile(r"([A-Z])")
SEPARATOR_PATTERN = re.compile(r"[_\s]+")


def humanize_lc(text):
    """
    Split ``text`` on every uppercase letter and "_" character and return
    the words as a lowercase sentence.

    Every uppercase letter starts a new word, so acronyms come out one
    letter per word ("URL" -> "u r l").

    Args:
        text: Identifier to humanize. ``None`` renders as an empty string,
            anything else is converted with ``str()``

    Returns:
        Single-space separated, lowercase phrase
    """
    if text is None:
        return ""
    text = UPPERCASE_PATTERN.sub(r"_\1", str(text))
    return SEPARATOR_PATTERN.sub(" ", text).strip().lower()


def humanize_uc(text):
    """
    Same as :func:`humanize_lc` with the first character of the sentence
    set to uppercase.
    """
    sentence = humanize_lc(text)
    if not sentence:
        return sentence
    return sentence[0].upper() + sentence[1:]


def register_filters(env):
    """Add the humanize filters to a Jinja2 environment."""
    env.filters["humanize_lc"] = humanize_lc
    env.filters["humanize_uc"] = humanize_uc
    return env


def init_app(app):
    """
    Make the humanize filters available to a Flask application's templates.

    Generated views use them to label columns at render time.
    """
    register_filters(app.jinja_env)
