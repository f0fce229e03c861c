import json
import logging
import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from .cancellation import CancelSignal
from .config import MossSettings
from .fetch import Fetch
from .mirror import Mirror
from .models import Report, SubmissionConfig
from .report import ReportExtractor
from .sources import SourceSet
from .submission import SubmissionClient

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Outcome of one Moss check."""
    url: str
    report: Report
    report_dir: Path | None = None  # Local mirror, if one was requested


class MossChecker:
    """ Runs a full Moss check: upload files, fetch the result pages, parse them """

    def __init__(
        self,
        config: SubmissionConfig,
        client: SubmissionClient | None = None,
        fetch: Fetch | None = None,
        http_timeout: float | None = None,
    ):
        self.config = config
        self.client = client or SubmissionClient()
        self.extractor = ReportExtractor(fetch=fetch, timeout=http_timeout)
        self.mirror = Mirror(fetch=fetch, timeout=http_timeout)

    @classmethod
    def from_settings(
        cls,
        config: SubmissionConfig,
        settings: MossSettings,
        fetch: Fetch | None = None,
        connect: Callable[..., socket.socket] = socket.create_connection,
    ) -> "MossChecker":
        """ Checker using the socket and HTTP timeouts of the process settings """
        return cls(
            config,
            client=SubmissionClient(timeout=settings.timeout, connect=connect),
            fetch=fetch,
            http_timeout=settings.http_timeout,
        )

    def run_check(
        self,
        student_files: Iterable[Path],
        base_files: Iterable[Path] = (),
        cancel: CancelSignal | None = None,
        report_dir: Path | None = None,
    ) -> CheckResult | None:
        """
        Submit files to Moss and extract the report.

        :param student_files: Student files, indexed in the given order
        :param base_files: Base files (templates, code handed out to students)
        :param cancel: Cooperative cancellation signal
        :param report_dir: Existing directory to mirror the result pages into
        :return: The result, or None if cancelled before Moss returned a URL
        """
        code = SourceSet()
        for path in student_files:
            # Directory mode keeps the path so Moss can group files per student
            code.add_file(path, None if self.config.directory_mode else Path(path).name)
        base = SourceSet()
        for path in base_files:
            base.add_file(path, Path(path).name)

        url = self.client.submit(self.config, base, code, cancel)
        if url is None:
            return None

        if report_dir is not None:
            self.mirror.mirror(url, report_dir, cancel)
        report = self.extractor.extract(url, cancel)
        return CheckResult(url=url, report=report, report_dir=report_dir)


def filter_by_threshold(report: Report, threshold: float) -> Report:
    """
    Keep matches where the larger of the two similarities reaches the threshold.

    :param threshold: Ratio between 0 and 1
    """
    if not isinstance(threshold, (int, float)):
        raise ValueError("Threshold must be a number")
    if threshold < 0 or threshold > 1:
        raise ValueError("Threshold must be between 0 and 1")
    return Report(matches=[m for m in report.matches if m.max_similarity >= threshold])


def save_report_json(report: Report, json_path: str | Path) -> Path:
    """ Saves the report as JSON """
    json_path = Path(json_path)
    with open(json_path, 'w', encoding='utf-8') as file:
        json.dump(report.model_dump(), file, ensure_ascii=False, indent=4)
    logger.info(f"Report saved to {json_path}")
    return json_path


def load_report_json(json_path: str | Path) -> Report:
    with open(json_path, "r", encoding="utf-8") as file:
        return Report.model_validate(json.load(file))
