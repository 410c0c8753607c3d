"""
Project analysis record.

``AnalysisRecord`` is produced by the external repository analyzer and
handed to the advisor by id. It is frozen: once an analysis is stored, the
advisor only ever reads it.

The ``ecosystem`` field is kept as the analyzer's raw string. It is resolved
against the closed ``Ecosystem`` enumeration when the record is scored, so a
record with an unrecognized ecosystem can still be stored and later rejected
with ``InvalidAnalysis`` by the recommendation engine.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ssg_advisor.taxonomy.ssg_taxonomy import Ecosystem, SizeClass, parse_ecosystem, size_class_for
from ssg_advisor.utils.time_utils import utcnow


class AnalysisRecord(BaseModel):
    """Facts about one analyzed project.

    Attributes:
        analysis_id: Unique id; a UUID4 string is generated when omitted.
        ecosystem: Primary ecosystem as reported by the analyzer
            (e.g. ``"javascript"``), or ``None`` if detection failed.
        languages: Detected languages, lowercased, de-duplicated and sorted.
        total_files: Total number of files in the repository.
        total_lines: Total lines of code, if the analyzer counted them.
        project_name: Human-readable project name, if known.
        created_at: UTC datetime the analysis was produced.
    """

    model_config = ConfigDict(frozen=True)

    analysis_id: str = Field(default_factory=lambda: str(uuid4()))
    ecosystem: Optional[str] = None
    languages: list[str] = Field(default_factory=list)
    total_files: int = 0
    total_lines: Optional[int] = None
    project_name: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("analysis_id")
    @classmethod
    def validate_analysis_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("analysis_id must be a non-empty string.")
        return v.strip()

    @field_validator("languages")
    @classmethod
    def normalize_languages(cls, v: list[str]) -> list[str]:
        return sorted({lang.strip().lower() for lang in v if lang and lang.strip()})

    @field_validator("total_files")
    @classmethod
    def validate_total_files(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"total_files must be non-negative, got {v}.")
        return v

    @field_validator("total_lines")
    @classmethod
    def validate_total_lines(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError(f"total_lines must be non-negative, got {v}.")
        return v

    @property
    def resolved_ecosystem(self) -> Optional[Ecosystem]:
        """The canonical ``Ecosystem``, or ``None`` if missing/unrecognized."""
        return parse_ecosystem(self.ecosystem)

    @property
    def size_class(self) -> SizeClass:
        return size_class_for(self.total_files)
