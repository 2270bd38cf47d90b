"""
HTML Escaping Utilities

Customer names and gateway error messages end up inside HTML emails and
Telegram HTML messages. Escape them before embedding.
"""

import html
from typing import Optional


def safe_html(text: Optional[str]) -> str:
    """
    Escapes HTML special characters in untrusted text.

    Examples:
        >>> safe_html("Jane</p><script>alert(1)</script>")
        "Jane&lt;/p&gt;&lt;script&gt;alert(1)&lt;/script&gt;"

        >>> safe_html(None)
        ""
    """
    if text is None:
        return ""
    return html.escape(str(text), quote=True)
