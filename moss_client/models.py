from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List

DEFAULT_HOST = "moss.stanford.edu"
DEFAULT_PORT = 7690


# TCP endpoint of the Moss service
class Address(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


# Settings sent as directives before any file is uploaded
class SubmissionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: int = Field(ge=0, le=2**32 - 1)         # Moss user ID ("moss <id>")
    language: str = "c"                                 # Language tag, e.g. c, cc, python
    max_matches: int = Field(default=10, ge=0, le=65535)  # Ignore code seen more than N times
    show_count: int = Field(default=250, ge=0, le=65535)  # Number of matches on the result page
    directory_mode: bool = False                        # Group files by directory
    experimental: bool = False                          # Use the experimental server
    comment: str = ""                                   # Shown on the result page
    endpoint: Address = Field(default_factory=Address)

    @field_validator("language")
    @classmethod
    def _single_token_language(cls, value: str) -> str:
        if not value or any(ch.isspace() for ch in value):
            raise ValueError("language must be a single non-empty token")
        return value

    @field_validator("comment")
    @classmethod
    def _single_line_comment(cls, value: str) -> str:
        if "\n" in value or "\r" in value:
            raise ValueError("comment must fit on one line")
        return value


# Inclusive line range reported for one side of a match
class Region(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @model_validator(mode="after")
    def _ordered(self) -> "Region":
        if self.start > self.end:
            raise ValueError(f"region start {self.start} is after end {self.end}")
        return self


# One side of a reported match
class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    similarity: float = Field(ge=0.0, le=1.0)
    regions: List[Region] = Field(default_factory=list)


# left.regions[i] and right.regions[i] describe the same overlapping block
class Match(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: Source
    right: Source

    @model_validator(mode="after")
    def _paired_regions(self) -> "Match":
        if len(self.left.regions) != len(self.right.regions):
            raise ValueError("left and right region lists must pair up")
        return self

    @property
    def max_similarity(self) -> float:
        return max(self.left.similarity, self.right.similarity)


# All matches of a result URL, in the order they appear on the index page
class Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    matches: List[Match] = Field(default_factory=list)
