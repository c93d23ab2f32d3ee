# snipta/__init__.py
"""snipta — LSP snippet template parser.

    >>> from snipta import parse
    >>> parse("match(${1:Arg1})")
    [Text(text='match('), Placeholder(tabstop=1, value=Text(text='Arg1')), Text(text=')')]
"""

from .snippet import (
    CaseChange, FormatText, FormatCapture, FormatCase, FormatConditional, FormatItem,
    Regex, Tabstop, Placeholder, Choice, Variable, Text, SnippetElement, Snippet,
    source_of, consumed_prefix,
    ParseError, parse, parse_prefix, load_snippet_text,
)

__version__ = "0.1.0"
