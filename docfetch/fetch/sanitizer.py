"""
HTML sanitization for fetched documents.

The allow-list follows the usual "safe post content" profile used by
blogging platforms, with one addition: <style> blocks are kept and their
rules pass through untouched, since exported documents carry all of their
formatting in a single stylesheet.
"""

import re
from typing import Dict, FrozenSet
from bs4 import BeautifulSoup, CData, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction

# Removed together with everything inside them
DROP_WITH_CONTENT = frozenset({
    "script", "iframe", "frame", "frameset", "object", "embed", "applet",
    "template", "svg", "math", "title", "noembed", "noframes",
    "textarea", "xmp", "plaintext", "listing",
})

WHITESPACE_PRESERVING = frozenset({"pre", "textarea", "style"})
ASCII_SPACES = "\x20\x0a\x09\x0c\x0d"

GLOBAL_ATTRIBUTES = frozenset({
    "class", "id", "style", "title", "role", "dir", "lang", "xml:lang", "hidden",
})

ALLOWED_TAGS: Dict[str, FrozenSet[str]] = {
    "a": frozenset({"href", "rel", "rev", "name", "target", "download", "referrerpolicy"}),
    "abbr": frozenset(),
    "acronym": frozenset(),
    "address": frozenset(),
    "article": frozenset({"align"}),
    "aside": frozenset({"align"}),
    "b": frozenset(),
    "bdo": frozenset(),
    "big": frozenset(),
    "blockquote": frozenset({"cite"}),
    "br": frozenset(),
    "caption": frozenset({"align"}),
    "cite": frozenset(),
    "code": frozenset(),
    "col": frozenset({"align", "char", "charoff", "span", "valign", "width"}),
    "colgroup": frozenset({"align", "char", "charoff", "span", "valign", "width"}),
    "dd": frozenset(),
    "del": frozenset({"datetime"}),
    "details": frozenset({"align", "open"}),
    "dfn": frozenset(),
    "div": frozenset({"align"}),
    "dl": frozenset(),
    "dt": frozenset(),
    "em": frozenset(),
    "figcaption": frozenset({"align"}),
    "figure": frozenset({"align"}),
    "font": frozenset({"color", "face", "size"}),
    "footer": frozenset({"align"}),
    "h1": frozenset({"align"}),
    "h2": frozenset({"align"}),
    "h3": frozenset({"align"}),
    "h4": frozenset({"align"}),
    "h5": frozenset({"align"}),
    "h6": frozenset({"align"}),
    "header": frozenset({"align"}),
    "hr": frozenset({"align", "noshade", "size", "width"}),
    "i": frozenset(),
    "img": frozenset({"alt", "align", "border", "height", "hspace", "loading", "longdesc", "vspace", "src", "usemap", "width"}),
    "ins": frozenset({"datetime", "cite"}),
    "kbd": frozenset(),
    "li": frozenset({"align", "value"}),
    "main": frozenset({"align"}),
    "mark": frozenset(),
    "nav": frozenset({"align"}),
    "ol": frozenset({"start", "type", "reversed"}),
    "p": frozenset({"align"}),
    "pre": frozenset({"width"}),
    "q": frozenset({"cite"}),
    "s": frozenset(),
    "samp": frozenset(),
    "section": frozenset({"align"}),
    "small": frozenset(),
    "span": frozenset({"align"}),
    "strike": frozenset(),
    "strong": frozenset(),
    "sub": frozenset(),
    "summary": frozenset({"align"}),
    "sup": frozenset(),
    "table": frozenset({"align", "bgcolor", "border", "cellpadding", "cellspacing", "rules", "summary", "width"}),
    "tbody": frozenset({"align", "char", "charoff", "valign"}),
    "td": frozenset({"abbr", "align", "axis", "bgcolor", "char", "charoff", "colspan", "headers", "height", "nowrap", "rowspan", "scope", "valign", "width"}),
    "tfoot": frozenset({"align", "char", "charoff", "valign"}),
    "th": frozenset({"abbr", "align", "axis", "bgcolor", "char", "charoff", "colspan", "headers", "height", "nowrap", "rowspan", "scope", "valign", "width"}),
    "thead": frozenset({"align", "char", "charoff", "valign"}),
    "tr": frozenset({"align", "bgcolor", "char", "charoff", "valign"}),
    "tt": frozenset(),
    "u": frozenset(),
    "ul": frozenset({"type"}),
    "var": frozenset(),
    # Stylesheet blocks: no attributes, body passes through unfiltered
    "style": frozenset(),
}

URL_ATTRIBUTES = frozenset({"href", "src", "cite", "longdesc", "usemap"})

ALLOWED_PROTOCOLS = frozenset({
    "http", "https", "ftp", "ftps", "mailto", "news", "irc", "gopher", "nntp",
    "feed", "telnet", "mms", "rtsp", "sms", "svn", "tel", "fax", "xmpp", "webcal", "urn",
})

_SCHEME_RE = re.compile(r"^([a-z][a-z0-9+.\-]*):")
_CONTROL_RE = re.compile(r"[\x00-\x20]+")
_UNSAFE_CSS_RE = re.compile(r"expression\s*\(|javascript:|vbscript:|behavior\s*:|-moz-binding", re.IGNORECASE)


def sanitize(raw_html: str) -> str:
    """
    Strip every tag and attribute that is not explicitly allowed.

    Disallowed containers that can execute code (script, iframe, object...)
    are removed with their content; any other disallowed tag is unwrapped so
    its text survives. Never raises; returns "" for empty input.
    """
    if not raw_html:
        return ""

    soup = BeautifulSoup(raw_html, "html.parser")

    for node in soup.find_all(string=lambda s: isinstance(s, (CData, Comment, Declaration, Doctype, ProcessingInstruction))):
        node.extract()

    for tag in soup.find_all(list(DROP_WITH_CONTENT)):
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        allowed = ALLOWED_TAGS.get(tag.name)
        if allowed is None:
            tag.unwrap()
            continue
        tag.attrs = {
            name: value
            for name, value in tag.attrs.items()
            if _attribute_allowed(tag.name, name, value, allowed)
        }

    # Unwrapping leaves neighbouring text nodes split; merge them and collapse
    # whitespace-only runs the same way the parser does on the next read.
    soup.smooth()
    for node in soup.find_all(string=True):
        if type(node) is not NavigableString or not node or node.strip(ASCII_SPACES):
            continue
        if node.find_parent(list(WHITESPACE_PRESERVING)) is not None:
            continue
        collapsed = "\n" if "\n" in node else " "
        if node != collapsed:
            node.replace_with(collapsed)

    return str(soup)


def _attribute_allowed(tag_name: str, name: str, value, allowed: FrozenSet[str]) -> bool:
    name = name.lower()
    if name.startswith("on"):
        return False
    if tag_name == "style":
        return False
    if not (
        name in allowed
        or name in GLOBAL_ATTRIBUTES
        or name.startswith("data-")
        or name.startswith("aria-")
    ):
        return False

    text = " ".join(value) if isinstance(value, list) else str(value)
    if name in URL_ATTRIBUTES:
        return _is_safe_url(text)
    if name == "style":
        return not _UNSAFE_CSS_RE.search(text)
    return True


def _is_safe_url(value: str) -> bool:
    """Relative URLs pass; absolute ones must use an allowed protocol"""
    compact = _CONTROL_RE.sub("", value).lower()
    match = _SCHEME_RE.match(compact)
    if not match:
        return True
    return match.group(1) in ALLOWED_PROTOCOLS
