import re
from collections import namedtuple


Token = namedtuple("Token", ["text", "start", "end", "quoted"])
Token.__doc__ = """A piece of a directive line. For quoted tokens the quotes
are stripped from ``text``, but ``start`` and ``end`` span the original
characters, quotes included.
"""

# A quoted string (the closing quote is optional), or a run of non-space chars
token_prog = re.compile(r"\"([^\"]*)\"?|[^\s\"]+")


def token_is_comment(text):
    return text.startswith(("//", "/*"))


def tokenize_line(line):
    """Split a line into whitespace-separated tokens.

    Double-quoted strings are single tokens. An unquoted token that starts
    with ``//`` or ``/*`` starts a comment, which runs to the end of the line
    and is dropped. Never fails.
    """
    return list(_tokenize(line))


def _tokenize(line):
    for match in token_prog.finditer(line):
        quoted_text = match.group(1)
        if quoted_text is not None:
            yield Token(quoted_text, match.start(), match.end(), True)
        else:
            text = match.group()
            if token_is_comment(text):
                break
            yield Token(text, match.start(), match.end(), False)
