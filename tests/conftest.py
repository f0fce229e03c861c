"""
Pytest configuration and shared fixtures for testing.
"""
import io
import pytest
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from moss_client.errors import FetchError


RESULT_URL = "http://moss.stanford.edu/results/8/123456789"


class FakeConnection:
    """Socket stand-in recording everything the client sends."""

    def __init__(self, ack=b"yes\n", response=b"http://moss.stanford.edu/results/8/123456789\n", fail_after=None):
        self.ack = ack
        self.response = response
        self.fail_after = fail_after  # Number of successful sendall calls before OSError
        self.sent = bytearray()
        self.send_calls = 0
        self.closed = False

    def sendall(self, data):
        if self.fail_after is not None and self.send_calls >= self.fail_after:
            raise BrokenPipeError("connection reset")
        self.send_calls += 1
        self.sent.extend(data)

    def recv(self, size):
        return self.ack[:size]

    def makefile(self, mode):
        return io.BytesIO(self.response)

    def close(self):
        self.closed = True


class FakeFetch:
    """fetch(url) backed by a dict of pages, recording requested URLs."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, "404 Client Error: Not Found")
        return self.pages[url]


class CancelAfter:
    """Signal that becomes set after `checks` polls."""

    def __init__(self, checks):
        self.checks = checks
        self.polls = 0

    def is_set(self):
        self.polls += 1
        return self.polls > self.checks


def parse_uploads(sent: bytes):
    """Split recorded protocol bytes into (directive lines, [(header fields, body)])."""
    lines = []
    files = []
    stream = io.BytesIO(bytes(sent))
    while True:
        line = stream.readline()
        if not line:
            break
        text = line.decode("utf-8").rstrip("\n")
        if text.startswith("file "):
            _, index, language, size, name = text.split(" ", 4)
            body = stream.read(int(size))
            files.append(((int(index), language, int(size), name), body))
        lines.append(text)
    return lines, files


def index_page(hrefs):
    rows = "\n".join(
        f'<TR><TD><A HREF="{href}">left (50%)</A>\n<TD><A HREF="{href}">right (40%)</A>\n<TD ALIGN=right>12'
        for href in hrefs
    )
    return f"""<HTML>
<HEAD><TITLE>Moss Results</TITLE></HEAD>
<BODY>
Moss Results<p>
<TABLE>
<TR><TH>File 1<TH>File 2<TH>Lines Matched
{rows}
</TABLE>
</BODY>
</HTML>
"""


def match_top_page(left, right, regions):
    """Moss match<N>-top.html with unclosed TH/TD cells and icon anchors."""
    rows = "\n".join(
        f'<TR><TD><A HREF="match0-0.html#{i}" NAME="{i}" TARGET="0">{lt}</A>\n'
        f'<TD><A HREF="match0-0.html#{i}" NAME="{i}" TARGET="0"><IMG SRC="../../bitmaps/tm_0_82.gif" ALT="other" BORDER="0" ALIGN=left></A>\n'
        f'<TD><A HREF="match0-1.html#{i}" NAME="{i}" TARGET="1">{rt}</A>\n'
        f'<TD><A HREF="match0-1.html#{i}" NAME="{i}" TARGET="1"><IMG SRC="../../bitmaps/tm_0_79.gif" ALT="other" BORDER="0" ALIGN=left></A>'
        for i, (lt, rt) in enumerate(regions)
    )
    return f"""<HTML>
<HEAD><TITLE>Top</TITLE></HEAD>
<BODY BGCOLOR=white>
<CENTER>
<TABLE BORDER="1" CELLSPACING="0" BGCOLOR="#d0d0d0">
<TR><TH>{left}<TH><IMG SRC="../../bitmaps/tm_0_82.gif" BORDER="0" ALIGN=left><TH>{right}<TH><IMG SRC="../../bitmaps/tm_0_79.gif" BORDER="0" ALIGN=left>
{rows}
</TABLE>
</CENTER>
</BODY>
</HTML>
"""


@pytest.fixture
def result_url():
    return RESULT_URL


@pytest.fixture
def sample_course_config():
    """Sample course configuration with a Moss block."""
    return {
        "course": {
            "name": "Operating Systems",
            "semester": "Fall 2024",
        },
        "labs": {
            "1": {
                "github-prefix": "os-task1",
                "short-name": "ЛР1",
            },
            "2": {
                "github-prefix": "os-task2",
                "short-name": "ЛР2",
                "moss": {
                    "language": "cc",
                    "max-matches": 5,
                    "show": 100,
                    "comment": "lab 2",
                    "directory": True,
                },
            },
        },
    }
