"""
Pasted-text cleaner.

Turns pasted HTML (retailer pages, spec tables) or plain text into clean
lines. Tables and definition lists become "key<TAB>value" lines so the
pair extractor can read them like any other delimited line.
"""

import re
import warnings
from typing import Any

from bs4 import BeautifulSoup, Comment, MarkupResemblesLocatorWarning

# Plain-text pastes often look like a URL or a file name to bs4
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

# Removed together with their content
NON_TEXT_TAGS = [
    "img", "svg", "picture", "video", "audio", "iframe", "canvas", "object", "embed",
    "script", "style", "noscript",
    "button", "nav", "footer", "form",
]

# Closing one of these ends a line
BLOCK_TAGS = [
    "p", "div", "tr", "li", "h1", "h2", "h3", "h4", "h5", "h6",
    "dt", "dd", "section", "article", "header", "blockquote",
]

CELL_TAGS = ["td", "th"]

MAX_CODE_POINT = 0x10FFFF

_NUMERIC_REF = re.compile(r"&#(?:(\d+)|[xX]([0-9a-fA-F]+));?")
_SURROGATES = re.compile("[\ud800-\udfff]")
_SPACES = re.compile(r"\s+")


def _drop_invalid_ref(match: re.Match) -> str:
    """Remove numeric references that cannot become a real character."""
    decimal, hexadecimal = match.groups()
    digits = (decimal or hexadecimal).lstrip("0")
    # No valid code point needs more than 7 digits in either base
    if not digits or len(digits) > 7:
        return ""
    code = int(digits, 10 if decimal else 16)
    if code > MAX_CODE_POINT or 0xD800 <= code <= 0xDFFF:
        return ""
    return match.group(0)


def _cell_text(cell) -> str:
    return _SPACES.sub(" ", cell.get_text()).strip()


def _table_to_lines(table) -> str:
    """Flatten one <table> into key<TAB>value lines."""
    rows = []
    for row in table.find_all("tr"):
        cells = [text for text in (_cell_text(c) for c in row.find_all(CELL_TAGS)) if text]
        if len(cells) >= 2:
            rows.append(cells[0] + "\t" + ", ".join(cells[1:]))
        elif len(cells) == 1:
            rows.append(cells[0])
    # Every row closes with a newline, the last one included
    return "".join(row + "\n" for row in rows)


def _flatten_definitions(soup: BeautifulSoup) -> None:
    """Pair each <dt> with the <dd> that follows it."""
    for term in soup.find_all("dt"):
        if term.decomposed:
            continue
        value = term.find_next_sibling()
        if value is None or value.name != "dd":
            continue
        line = term.get_text().strip() + "\t" + value.get_text().strip() + "\n"
        value.decompose()
        term.replace_with(line)


def normalize_whitespace(text: str) -> str:
    """Collapse tab runs, trim around newlines, keep at most one blank line."""
    text = re.sub(r"\t+", "\t", text)
    text = re.sub(r"[ \t]*\n[ \t]*", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def clean_input_text(text: Any) -> str:
    """
    Clean HTML artifacts and non-text elements from pasted text.

    Steps:
        1. Drop images, media, scripts, comments, nav/footer/form blocks
        2. Table rows → "key\\tvalue" (extra cells joined with ", ")
        3. <dt>/<dd> pairs → "term\\tvalue"
        4. Block-level closers, <br>, <hr> → newline; adjacent cells → tab
        5. Take the text (entities decoded by the parser), normalize whitespace

    Numeric character references that name no character (surrogates,
    beyond U+10FFFF, absurdly long) are dropped before parsing.

    Args:
        text: Pasted content; anything that is not a non-empty str yields ""

    Returns:
        Cleaned text, one logical line per line
    """
    if not text or not isinstance(text, str):
        return ""

    soup = BeautifulSoup(_NUMERIC_REF.sub(_drop_invalid_ref, text), "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for tag in soup.find_all(NON_TEXT_TAGS):
        if not tag.decomposed:
            tag.decompose()

    table = soup.find("table")
    while table is not None:
        table.replace_with(_table_to_lines(table))
        table = soup.find("table")

    # Definition lists must be paired before block-level closers become newlines
    _flatten_definitions(soup)

    for tag in soup.find_all(["br", "hr"]):
        tag.replace_with("\n")
    for tag in soup.find_all(BLOCK_TAGS):
        tag.append("\n")
    for cell in soup.find_all(CELL_TAGS):
        following = cell.find_next_sibling()
        if following is not None and following.name in CELL_TAGS:
            cell.append("\t")

    cleaned = soup.get_text().replace("\xa0", " ")
    cleaned = _SURROGATES.sub("", cleaned)

    return normalize_whitespace(cleaned)


def split_lines(cleaned: str) -> list[str]:
    """Split cleaned text into trimmed, non-empty lines."""
    return [line.strip() for line in cleaned.split("\n") if line.strip()]
