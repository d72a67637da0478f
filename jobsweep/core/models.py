import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from pydantic import BaseModel


@dataclass(frozen=True)
class JobRecord:
    """
    Canonical job listing extracted from a results view.
    """

    title: str
    employer: str
    url: str
    location: Optional[str] = None
    posted_date: Optional[str] = None
    salary: Optional[str] = None
    summary: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Output shape: optional fields are omitted when absent, posted_date is written as 'date'."""
        out = {"title": self.title, "employer": self.employer}
        for key, value in (
            ("location", self.location),
            ("date", self.posted_date),
            ("salary", self.salary),
            ("summary", self.summary),
        ):
            if value:
                out[key] = value
        out["url"] = self.url
        return out


class ResultSet:
    """
    Ordered collection of JobRecord, unique by canonical url.
    Insertion order is first-seen order.
    """

    def __init__(self, records: Iterable[JobRecord] = ()):
        self._by_key: Dict[str, JobRecord] = {}
        for record in records:
            self.add(record)

    def add(self, record: JobRecord) -> bool:
        """Keep the record unless its url is already present. Returns True if kept."""
        if not record.url or record.url in self._by_key:
            return False
        self._by_key[record.url] = record
        return True

    def extend(self, records: Iterable[JobRecord]) -> int:
        return sum(1 for record in records if self.add(record))

    @property
    def records(self) -> List[JobRecord]:
        return list(self._by_key.values())

    @property
    def keys(self) -> List[str]:
        return list(self._by_key.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[JobRecord]:
        return iter(list(self._by_key.values()))

    def __len__(self) -> int:
        return len(self._by_key)

    def __repr__(self) -> str:
        return f"ResultSet({len(self)} records)"


class GateState(Enum):
    CLEAR = "clear"
    GATED = "gated"


class AttemptOutcome(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class Attempt:
    """
    One pass of the scrape pipeline on one freshly provisioned session.
    """

    index: int
    proxy_label: Optional[str] = None
    outcome: AttemptOutcome = AttemptOutcome.PENDING
    error_kind: Optional[str] = None
    error: Optional[BaseException] = None
    diagnostics: List[str] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    def succeed(self):
        self.outcome = AttemptOutcome.SUCCESS
        self.finished_at = time.time()

    def fail(self, error: BaseException, diagnostics: Optional[List[str]] = None):
        self.outcome = AttemptOutcome.FAILURE
        self.error = error
        self.error_kind = type(error).__name__
        self.diagnostics = list(diagnostics or [])
        self.finished_at = time.time()

    @property
    def elapsed(self) -> float:
        end = self.finished_at if self.finished_at is not None else time.time()
        return end - self.started_at


@dataclass
class ScrapeResult:
    records: ResultSet
    attempts: List[Attempt]

    @property
    def attempts_used(self) -> int:
        return len(self.attempts)

    def to_list(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self.records]


class ProxyCredential(BaseModel):
    """
    One upstream proxy entry. Shared and read-only across attempts.
    """

    model_config = {"frozen": True}

    server: str
    username: Optional[str] = None
    password: Optional[str] = None
    country: Optional[str] = None
    session: Optional[str] = None

    def to_playwright(self) -> Dict[str, str]:
        config = {"server": self.server}
        if self.username:
            config["username"] = self.username
        if self.password:
            config["password"] = self.password
        return config
