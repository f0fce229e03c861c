"""
Unit tests for moss_client/checker.py

Tests the end-to-end check with a mocked submission client.
"""
import pytest
from unittest.mock import MagicMock, Mock
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from moss_client.checker import (
    MossChecker,
    filter_by_threshold,
    load_report_json,
    save_report_json,
)
from moss_client.config import MossSettings
from moss_client.models import Match, Region, Report, Source, SubmissionConfig
from moss_client.submission import SubmissionClient
from conftest import RESULT_URL, FakeConnection, FakeFetch, index_page, match_top_page


def make_match(left_similarity, right_similarity):
    return Match(
        left=Source(filename="alice.c", similarity=left_similarity, regions=[Region(start=1, end=4)]),
        right=Source(filename="bob.c", similarity=right_similarity, regions=[Region(start=2, end=5)]),
    )


@pytest.fixture
def student_files(tmp_path):
    files = []
    for name in ("alice", "bob"):
        path = tmp_path / name / "lab2.c"
        path.parent.mkdir()
        path.write_bytes(f"// {name}\nint main() {{ return 0; }}\n".encode())
        files.append(path)
    return files


@pytest.fixture
def result_fetch():
    return FakeFetch({
        RESULT_URL: index_page([f"{RESULT_URL}/match0.html"]),
        f"{RESULT_URL}/match0-top.html": match_top_page("alice/lab2.c (91%)", "bob/lab2.c (88%)", [("1-2", "1-2")]),
    })


def mock_client(url=RESULT_URL):
    client = MagicMock(spec=SubmissionClient)
    client.submit.return_value = url
    return client


class TestMossChecker:
    """Tests for MossChecker.run_check."""

    def test_run_check(self, student_files, result_fetch):
        client = mock_client()
        checker = MossChecker(SubmissionConfig(client_id=1), client=client, fetch=result_fetch)
        result = checker.run_check(student_files)
        assert result.url == RESULT_URL
        assert result.report.matches[0].left.filename == "alice/lab2.c"
        assert result.report.matches[0].left.similarity == 0.91
        assert result.report_dir is None

    def test_sources_passed_in_order(self, tmp_path, student_files, result_fetch):
        base_file = tmp_path / "lab2_template.c"
        base_file.write_bytes(b"int main();\n")
        client = mock_client()
        MossChecker(SubmissionConfig(client_id=1), client=client, fetch=result_fetch).run_check(
            student_files, [base_file]
        )
        _, base, code, _ = client.submit.call_args[0]
        assert [s.display_name for s in base] == ["lab2_template.c"]
        assert [s.display_name for s in code] == ["lab2.c", "lab2.c"]

    def test_directory_mode_keeps_paths(self, student_files, result_fetch):
        client = mock_client()
        config = SubmissionConfig(client_id=1, directory_mode=True)
        MossChecker(config, client=client, fetch=result_fetch).run_check(student_files)
        code = client.submit.call_args[0][2]
        assert [s.display_name for s in code] == [p.as_posix() for p in student_files]

    def test_missing_file_before_submit(self, tmp_path, student_files):
        client = mock_client()
        checker = MossChecker(SubmissionConfig(client_id=1), client=client, fetch=FakeFetch({}))
        with pytest.raises(FileNotFoundError):
            checker.run_check(student_files + [tmp_path / "carol" / "lab2.c"])
        client.submit.assert_not_called()

    def test_cancelled_submission(self, student_files):
        fetch = FakeFetch({})
        checker = MossChecker(SubmissionConfig(client_id=1), client=mock_client(url=None), fetch=fetch)
        assert checker.run_check(student_files) is None
        assert fetch.calls == []

    def test_mirror_into_report_dir(self, tmp_path, student_files, result_fetch):
        result_fetch.pages[f"{RESULT_URL}/index.html"] = result_fetch.pages[RESULT_URL]
        for name in ("match0.html", "match0-0.html", "match0-1.html"):
            result_fetch.pages[f"{RESULT_URL}/{name}"] = f"<HTML>{name}</HTML>"
        report_dir = tmp_path / "report"
        report_dir.mkdir()
        result = MossChecker(SubmissionConfig(client_id=1), client=mock_client(), fetch=result_fetch).run_check(
            student_files, report_dir=report_dir
        )
        assert result.report_dir == report_dir
        assert (report_dir / "match0-top.html").exists()
        assert len(result.report.matches) == 1


class TestFilterByThreshold:
    """Tests for filter_by_threshold function."""

    def test_either_side_reaches_threshold(self):
        report = Report(matches=[make_match(0.9, 0.2), make_match(0.1, 0.75), make_match(0.3, 0.4)])
        filtered = filter_by_threshold(report, 0.7)
        assert [m.max_similarity for m in filtered.matches] == [0.9, 0.75]

    def test_threshold_is_inclusive(self):
        assert len(filter_by_threshold(Report(matches=[make_match(0.5, 0.5)]), 0.5).matches) == 1

    @pytest.mark.parametrize("threshold", [-0.1, 1.5, "0.7"])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(ValueError):
            filter_by_threshold(Report(), threshold)


class TestReportJson:
    """Tests for JSON persistence."""

    def test_save_and_load(self, tmp_path):
        report = Report(matches=[make_match(0.82, 0.79)])
        path = save_report_json(report, tmp_path / "results.json")
        assert load_report_json(path) == report

    def test_json_layout(self, tmp_path):
        path = save_report_json(Report(matches=[make_match(0.82, 0.79)]), tmp_path / "results.json")
        text = path.read_text(encoding="utf-8")
        assert '"filename": "alice.c"' in text
        assert '"start": 1' in text


class TestFromSettings:
    """Tests for MossChecker.from_settings."""

    def test_timeouts_reach_socket_and_http(self, student_files, result_fetch):
        """Socket timeout is passed to connect, HTTP timeout to the page fetchers."""
        settings = MossSettings(user_id=1, timeout=12.5, http_timeout=7.0)
        connect = Mock(return_value=FakeConnection())
        checker = MossChecker.from_settings(SubmissionConfig(client_id=1), settings, fetch=result_fetch, connect=connect)
        result = checker.run_check(student_files)
        connect.assert_called_once_with(("moss.stanford.edu", 7690), 12.5)
        assert result.url == RESULT_URL
        assert checker.extractor._default_fetcher().timeout == 7.0
        assert checker.mirror._default_fetcher().timeout == 7.0

    def test_default_fetcher_timeout(self):
        """Without an explicit HTTP timeout the fetcher default applies."""
        checker = MossChecker(SubmissionConfig(client_id=1))
        assert checker.extractor._default_fetcher().timeout == 30.0
