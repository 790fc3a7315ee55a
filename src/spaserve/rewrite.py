"""
=============================================================================
<base href> REWRITING
=============================================================================

SPA builds usually ship an index.html containing

    <base href="/" />

which makes every relative URL in the document (scripts, styles, router
links) resolve against "/". Behind a proxy that mounts the app under
/app/, the base has to become "/app/" or the browser fetches
/static/js/main.js instead of /app/static/js/main.js.

    BEFORE                                AFTER (base "/app/")
    ──────                                ───────────────────
    <head>                                <head>
      <base href="/" />          ──►        <base href="/app/" />
      <script src="static/js/..."           <script src="static/js/..."

=============================================================================
MATCHING RULES
=============================================================================

    <base href="  VALUE  "   optional whitespace   />
    ───────────── ─────── ─  ────────────────────  ──
        group 1   replaced        group 2 (with the quote)

- Only the FIRST matching element is rewritten.
- Attribute order and spelling must be exactly as above; anything else
  (single quotes, extra attributes, no self-closing slash) is left alone.
- A document without a match is returned unchanged.

This is a plain text substitution, not an HTML parser. Swapping in an
HTML-aware rewrite only requires replacing rewrite_base_href().

=============================================================================
"""

import re


BASE_HREF_PATTERN = re.compile(r'(<base href=")[^"]*("\s*/>)')


def rewrite_base_href(document: str, base: str) -> str:
    """
    Replace the href of the first <base href="..." /> element with base.

    The base is inserted literally; backslashes or group references in
    it are not interpreted.

    Examples:
        >>> rewrite_base_href('<base href="/" />', "/app/")
        '<base href="/app/" />'

        >>> rewrite_base_href("<p>no base here</p>", "/app/")
        '<p>no base here</p>'
    """
    return BASE_HREF_PATTERN.sub(
        lambda match: match.group(1) + base + match.group(2),
        document,
        count=1,
    )
