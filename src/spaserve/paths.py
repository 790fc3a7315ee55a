"""
=============================================================================
LEXICAL PATH CLEANING
=============================================================================

URL paths and asset paths are slash-separated strings, never OS paths.
Cleaning them is purely lexical: nothing here touches the file system.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CLEANING RULES                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Collapse repeated slashes          /a//b      → /a/b           │
    │   2. Drop "." elements                  /a/./b     → /a/b           │
    │   3. ".." removes the element before   /a/b/../c  → /a/c           │
    │   4. ".." never climbs above root       /../../x   → /x             │
    │   5. No trailing slash (except root)    /a/b/      → /a/b           │
    │   6. Empty result                       ""         → "."            │
    │                                         "/.."      → "/"            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY NOT os.path.normpath / posixpath.normpath?
=============================================================================

posixpath.normpath keeps a leading double slash ("//a" stays "//a",
as POSIX allows that to mean something implementation-defined).
For URL paths this is just another way of writing "/a", so we
implement the rules above directly.

Prefixing "/" before cleaning is how the SPA handler keeps every
request path inside the asset root:

    clean_path("/" + "../../etc/passwd")  →  "/etc/passwd"

=============================================================================
"""


def clean_path(path: str) -> str:
    """
    Return the shortest lexically equivalent form of a slash path.

    Examples:
        >>> clean_path("/static/../index.html")
        '/index.html'

        >>> clean_path("a/b/../../..")
        '..'

        >>> clean_path("")
        '.'
    """
    if path == "":
        return "."

    rooted = path.startswith("/")
    elements: list[str] = []

    for element in path.split("/"):
        if element in ("", "."):
            continue
        if element == "..":
            if elements and elements[-1] != "..":
                elements.pop()
            elif not rooted:
                # Unrooted paths keep leading ".." elements
                elements.append("..")
            continue
        elements.append(element)

    cleaned = "/".join(elements)
    if rooted:
        return "/" + cleaned
    return cleaned or "."


def join_path(*elements: str) -> str:
    """
    Join path elements with "/" and clean the result.

    Empty elements are ignored; if all elements are empty the result
    is the empty string.

        >>> join_path("/prefix", "/foo/bar")
        '/prefix/foo/bar'
    """
    joined = "/".join(element for element in elements if element)
    if not joined:
        return ""
    return clean_path(joined)
