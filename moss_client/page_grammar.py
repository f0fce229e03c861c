"""
Grammar of Moss result pages.

The index page links every match as ``match<N>.html``. Each
``match<N>-top.html`` page holds a table whose header cells read
``name (NN%)`` for the left file (cell 0) and the right file (cell 2), and
whose anchors come in groups of four per region pair:

    <left "A-B">, <left icon>, <right "C-D">, <right icon>

Everything positional about the layout lives in this module.
"""
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser

from .errors import InvalidRegionError, MalformedPageError
from .models import Match, Region, Source

LINK_MARKER = "match"
ANCHOR_GROUP = 4
LEFT_HEADER = 0
RIGHT_HEADER = 2
LEFT_ANCHOR = 0
RIGHT_ANCHOR = 2

REGION_PATTERN = re.compile(r"([0-9]+)-([0-9]+)")
DESCRIPTOR_PATTERN = re.compile(r"^(?P<name>.*?)\s*\((?P<percent>[0-9]+(?:\.[0-9]+)?)%\)$", re.DOTALL)


@dataclass
class Anchor:
    href: str | None
    text: str


class ResultPageParser(HTMLParser):
    """
    Collects text of ``th`` cells and ``a`` elements.

    Moss leaves ``<TH>`` and ``<TD>`` unclosed, so a cell also ends at the next
    cell, row or table boundary.
    """

    CELL_BOUNDARIES = {"th", "td", "tr", "table", "thead", "tbody"}

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.headers: list[str] = []
        self.anchors: list[Anchor] = []
        self._header_text: list[str] | None = None
        self._anchor_href: str | None = None
        self._anchor_text: list[str] | None = None

    def handle_starttag(self, tag, attrs):
        if tag in self.CELL_BOUNDARIES:
            self._close_header()
        if tag == "th":
            self._header_text = []
        elif tag == "a":
            self._close_anchor()
            self._anchor_href = dict(attrs).get("href")
            self._anchor_text = []

    def handle_endtag(self, tag):
        if tag == "a":
            self._close_anchor()
        elif tag in self.CELL_BOUNDARIES:
            self._close_header()

    def handle_data(self, data):
        if self._header_text is not None:
            self._header_text.append(data)
        if self._anchor_text is not None:
            self._anchor_text.append(data)

    def close(self):
        super().close()
        self._close_anchor()
        self._close_header()

    def _close_header(self):
        if self._header_text is not None:
            self.headers.append(_normalize_space("".join(self._header_text)))
            self._header_text = None

    def _close_anchor(self):
        if self._anchor_text is not None:
            self.anchors.append(Anchor(self._anchor_href, _normalize_space("".join(self._anchor_text))))
            self._anchor_href = None
            self._anchor_text = None


@dataclass
class ParsedPage:
    headers: list[str] = field(default_factory=list)
    anchors: list[Anchor] = field(default_factory=list)


def _normalize_space(text: str) -> str:
    return " ".join(text.split())


def parse_page(html: str) -> ParsedPage:
    parser = ResultPageParser()
    parser.feed(html)
    parser.close()
    return ParsedPage(parser.headers, parser.anchors)


def extract_match_links(html: str) -> list[str]:
    """Hrefs containing "match", de-duplicated, in first-seen order."""
    seen = set()
    links = []
    for anchor in parse_page(html).anchors:
        href = anchor.href
        if href and LINK_MARKER in href and href not in seen:
            seen.add(href)
            links.append(href)
    return links


def extract_headers(html: str) -> list[str]:
    """Text of every ``th`` cell, in document order."""
    return parse_page(html).headers


def extract_region_anchors(html: str) -> list[tuple[str, str]]:
    """
    Pair up region tokens from anchor groups of four.

    Returns:
        One (left token, right token) per group

    Raises:
        InvalidRegionError: if a trailing group has no right-hand token
    """
    return _pair_anchor_texts([anchor.text for anchor in parse_page(html).anchors])


def parse_region(token: str) -> Region:
    """
    Parse ``"<from>-<to>"`` into an inclusive Region.

    Raises:
        InvalidRegionError: on a missing separator, non-numeric bounds or from > to
    """
    found = REGION_PATTERN.fullmatch(token.strip())
    if not found:
        raise InvalidRegionError(token)
    start, end = int(found.group(1)), int(found.group(2))
    if start > end:
        raise InvalidRegionError(token, "start is after end")
    return Region(start=start, end=end)


def _split_descriptor(descriptor: str) -> tuple[str, float]:
    found = DESCRIPTOR_PATTERN.match(descriptor.strip())
    if not found:
        raise MalformedPageError(f"No similarity percentage in header {descriptor!r}")
    percent = float(found.group("percent"))
    if percent > 100:
        raise MalformedPageError(f"Similarity above 100% in header {descriptor!r}")
    return found.group("name"), percent


def parse_percentage(descriptor: str) -> float:
    """``"name (82%)"`` -> 0.82"""
    return _split_descriptor(descriptor)[1] / 100


def parse_filename(descriptor: str) -> str:
    """``"name (82%)"`` -> ``"name"``"""
    return _split_descriptor(descriptor)[0]


def parse_source(descriptor: str, regions: list[Region]) -> Source:
    return Source(
        filename=parse_filename(descriptor),
        similarity=parse_percentage(descriptor),
        regions=regions,
    )


def parse_match_page(html: str) -> Match:
    """
    Build a Match from a ``match<N>-top.html`` page.

    Raises:
        MalformedPageError: fewer than 3 header cells or headers without a 0-100% similarity
        InvalidRegionError: any region token fails to parse
    """
    page = parse_page(html)
    if len(page.headers) <= RIGHT_HEADER:
        raise MalformedPageError(f"Expected at least 3 header cells, found {len(page.headers)}")

    left_regions = []
    right_regions = []
    for left_token, right_token in _pair_anchor_texts([a.text for a in page.anchors]):
        left_regions.append(parse_region(left_token))
        right_regions.append(parse_region(right_token))

    return Match(
        left=parse_source(page.headers[LEFT_HEADER], left_regions),
        right=parse_source(page.headers[RIGHT_HEADER], right_regions),
    )


def _pair_anchor_texts(texts: list[str]) -> list[tuple[str, str]]:
    pairs = []
    for idx in range(0, len(texts), ANCHOR_GROUP):
        group = texts[idx:idx + ANCHOR_GROUP]
        if len(group) <= RIGHT_ANCHOR:
            raise InvalidRegionError(group[LEFT_ANCHOR], "missing right-hand region")
        pairs.append((group[LEFT_ANCHOR], group[RIGHT_ANCHOR]))
    return pairs
