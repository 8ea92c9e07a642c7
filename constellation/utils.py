"""
Utility functions for the application
"""
import re

_HIGHLIGHT_TAG = re.compile(r'</?span[^>]*>')


def strip_highlight_markup(snippet: str) -> str:
    """
    Remove search highlight markup from a Wikipedia search snippet

    Args:
        snippet: Snippet as returned by list=search, e.g.
            'The <span class="searchmatch">Moon</span> is...'

    Returns:
        Snippet with <span> tags removed (other markup is left untouched)
    """
    return _HIGHLIGHT_TAG.sub('', snippet)
