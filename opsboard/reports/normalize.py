"""Bacula job payload normalization.

The proxy has returned the job list under several shapes over time. The
probing in `extract_job_list` locates the list; every entry is then validated
against `BaculaJob`, the shape documented by the Bacularis jobs API.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from opsboard.core.logging_config import get_logger

logger = get_logger(__name__)

# Probed in this order after checking whether the payload itself is a list
_LIST_KEYS = ("jobs", "output", "data", "result")

Timestamp = Union[str, int, float, None]


class BaculaJob(BaseModel):
    """One Bacula job record."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    jobid: Optional[Union[int, str]] = Field(default=None, validation_alias=AliasChoices("jobid", "JobId", "id"))
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("name", "job", "jobname"))
    client: Optional[str] = Field(default=None, validation_alias=AliasChoices("client", "clientname"))
    type: Optional[str] = Field(default=None, description="B backup, R restore, V verify, ...")
    level: Optional[str] = Field(default=None, description="F full, I incremental, D differential")
    jobstatus: Optional[str] = Field(default=None, validation_alias=AliasChoices("jobstatus", "JobStatus", "status"))
    jobbytes: int = Field(default=0, validation_alias=AliasChoices("jobbytes", "JobBytes", "bytes"))
    jobfiles: int = Field(default=0, validation_alias=AliasChoices("jobfiles", "JobFiles", "files"))
    joberrors: int = Field(default=0, validation_alias=AliasChoices("joberrors", "JobErrors"))

    starttime: Timestamp = None
    endtime: Timestamp = None
    realendtime: Timestamp = None
    schedtime: Timestamp = None
    start_time: Timestamp = None
    end_time: Timestamp = None

    @field_validator("jobbytes", "jobfiles", "joberrors", mode="before")
    @classmethod
    def _coerce_count(cls, v: Any) -> int:
        # Unreadable counts become 0; the job is kept
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            return 0
        if isinstance(v, int):
            return max(v, 0)
        text = str(v).strip()
        try:
            return max(int(text), 0)
        except ValueError:
            pass
        try:
            return max(int(float(text)), 0)
        except (ValueError, OverflowError):
            return 0

    @field_validator("jobstatus", "level", "type", "name", "client", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, (dict, list)):
            return None
        return str(v).strip() or None

    @field_validator("jobid", mode="before")
    @classmethod
    def _drop_unreadable_id(cls, v: Any) -> Any:
        if isinstance(v, (int, str)) and not isinstance(v, bool):
            return v
        return None

    @field_validator("starttime", "endtime", "realendtime", "schedtime", "start_time", "end_time", mode="before")
    @classmethod
    def _drop_unreadable_time(cls, v: Any) -> Any:
        if isinstance(v, (str, int, float)) and not isinstance(v, bool):
            return v
        return None

    @property
    def display_name(self) -> str:
        return self.name or (f"job {self.jobid}" if self.jobid is not None else "unknown")


def extract_job_list(payload: Any) -> List[Any]:
    """Locate the job list inside a proxy payload.

    Order: the payload itself, then ``jobs``, ``output``, ``data``, ``result``,
    then the first list-valued property. Returns an empty list when none is found.
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    for key in _LIST_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    for key, value in payload.items():
        if isinstance(value, list):
            logger.debug("Job list found under unexpected key '%s'", key)
            return value
    return []


def normalize_jobs(payload: Any) -> List[BaculaJob]:
    """Extract and validate every job entry of a proxy payload.

    Entries that are not objects are dropped with a warning. Unreadable fields
    are coerced or defaulted, so every object entry yields a job.
    """
    jobs: List[BaculaJob] = []
    for i, entry in enumerate(extract_job_list(payload)):
        if not isinstance(entry, dict):
            logger.warning("Dropping job entry %s: expected an object, got %s", i, type(entry).__name__)
            continue
        try:
            jobs.append(BaculaJob.model_validate(entry))
        except ValidationError as e:
            logger.warning("Dropping job entry %s: %s", i, e.errors()[0].get("msg", e))
    return jobs
