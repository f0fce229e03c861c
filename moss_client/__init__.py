"""
Client for the Moss plagiarism detection service.

- submission: TCP protocol used to upload code and obtain a result URL
- report: extraction of matches and line regions from result pages
- mirror: local copy of result pages
- page_grammar: layout of the result pages
- checker: end-to-end check over local files
"""

from .errors import (
    MossError,
    MossConnectionError,
    LanguageNotSupportedError,
    MalformedResponseError,
    InvalidRegionError,
    InvalidTargetError,
    FetchError,
    MalformedPageError,
    SourceConsumedError,
)

from .models import (
    Address,
    SubmissionConfig,
    Region,
    Source,
    Match,
    Report,
)

from .sources import CodeSource, SourceSet

from .submission import SubmissionClient

from .fetch import HttpFetcher

from .page_grammar import (
    extract_match_links,
    extract_headers,
    extract_region_anchors,
    parse_region,
    parse_percentage,
    parse_filename,
    parse_match_page,
)

from .report import ReportExtractor

from .mirror import Mirror, download_page

from .checker import (
    MossChecker,
    CheckResult,
    filter_by_threshold,
    save_report_json,
    load_report_json,
)

from .config import MossSettings, load_course_config, submission_config_from_course

from .logging_config import setup_logging

__all__ = [
    # errors
    "MossError",
    "MossConnectionError",
    "LanguageNotSupportedError",
    "MalformedResponseError",
    "InvalidRegionError",
    "InvalidTargetError",
    "FetchError",
    "MalformedPageError",
    "SourceConsumedError",
    # models
    "Address",
    "SubmissionConfig",
    "Region",
    "Source",
    "Match",
    "Report",
    # sources
    "CodeSource",
    "SourceSet",
    # submission
    "SubmissionClient",
    # fetch
    "HttpFetcher",
    # page_grammar
    "extract_match_links",
    "extract_headers",
    "extract_region_anchors",
    "parse_region",
    "parse_percentage",
    "parse_filename",
    "parse_match_page",
    # report
    "ReportExtractor",
    # mirror
    "Mirror",
    "download_page",
    # checker
    "MossChecker",
    "CheckResult",
    "filter_by_threshold",
    "save_report_json",
    "load_report_json",
    # config
    "MossSettings",
    "load_course_config",
    "submission_config_from_course",
    # logging
    "setup_logging",
]
