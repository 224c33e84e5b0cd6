"""Record pipeline: ordered stages applied to every record."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

from .core import Record
from .errors import DropRecord

if TYPE_CHECKING:
    from .crawl import Crawler


class Stage(ABC):
    """One step of record processing.

    ``process`` returns the (possibly replaced) record for the next stage.
    Raising DropRecord is the only way to stop a record; any other exception
    propagates to the caller and ends the run.
    """

    def open(self, crawler: "Crawler | None") -> None:
        """Called once before the first record."""

    def close(self) -> None:
        """Called once after the last record."""

    @abstractmethod
    def process(self, record: Record, crawler: "Crawler | None") -> Record:
        ...


class Pipeline:
    """Runs records through registered stages in registration order."""

    def __init__(self, stages: Iterable[Stage] = ()):
        self._stages: list[Stage] = []
        self._open = False
        self._opened: list[Stage] = []
        self.submitted = 0
        self.completed = 0
        self.dropped = 0
        for stage in stages:
            self.register(stage)

    @property
    def stages(self) -> tuple[Stage, ...]:
        return tuple(self._stages)

    def register(self, stage: Stage) -> "Pipeline":
        """Append a stage. The stage list is fixed once the pipeline is open."""
        if self._open:
            raise RuntimeError("Cannot register stages on an open pipeline")
        self._stages.append(stage)
        return self

    def open(self, crawler: "Crawler | None" = None):
        """Open every stage. If one fails, the stages already opened are closed."""
        self._opened = []
        self._open = True
        try:
            for stage in self._stages:
                stage.open(crawler)
                self._opened.append(stage)
        except Exception:
            self.close()
            raise

    def close(self):
        if not self._open:
            return
        self._open = False
        opened, self._opened = self._opened, []
        for stage in opened:
            stage.close()

    def submit(self, record: Record, crawler: "Crawler | None" = None) -> None:
        """Feed one record through every stage."""
        self.submitted += 1
        for stage in self._stages:
            try:
                record = stage.process(record, crawler)
            except DropRecord:
                self.dropped += 1
                return
        self.completed += 1


class StripStage(Stage):
    """Strip surrounding whitespace from string fields."""

    def process(self, record, crawler):
        return {
            key: value.strip() if isinstance(value, str) else value
            for key, value in record.items()
        }


class RequireFieldsStage(Stage):
    """Tag records lacking required fields with a ``_missing`` list.

    With ``drop=True`` such records are dropped instead.
    """

    def __init__(self, fields: Iterable[str], drop: bool = False):
        self.fields = tuple(fields)
        self.drop = drop

    def process(self, record, crawler):
        missing = [name for name in self.fields if record.get(name) in (None, "")]
        if not missing:
            return record
        if self.drop:
            raise DropRecord(f"missing fields: {', '.join(missing)}")
        return {**record, "_missing": missing}


class DropDuplicatesStage(Stage):
    """Drop records whose ``key`` value was already seen in this run."""

    def __init__(self, key: str):
        self.key = key
        self._seen: set = set()

    def open(self, crawler):
        self._seen = set()

    def process(self, record, crawler):
        value = record.get(self.key)
        try:
            hash(value)
        except TypeError:
            value = repr(value)
        if value in self._seen:
            raise DropRecord(f"duplicate {self.key}: {value!r}")
        self._seen.add(value)
        return record
