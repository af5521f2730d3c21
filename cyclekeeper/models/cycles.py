"""Pydantic models for logged cycles.

A ``CycleRecord`` carries a tagged identifier: ``LocalId`` for records that
have never been confirmed by the remote store (timestamp based), and
``RemoteId`` for identifiers assigned by the remote store.  Code that needs
to know whether a record is eligible for a remote write checks the identifier
type, never its text.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from cyclekeeper.config_loader import get_tracker_config
from cyclekeeper.exceptions import ValidationError
from cyclekeeper.models.base import CycleKeeperBase

_LOCAL_PREFIX = "local:"


# ---------- Enums ----------

class Flow(str, Enum):
    light = "light"
    normal = "normal"
    heavy = "heavy"

    @property
    def label(self) -> str:
        return get_tracker_config().flow_label(self.value)


# ---------- Identifiers ----------

class LocalId(CycleKeeperBase):
    """Identifier of a record known only to this device."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["local"] = "local"
    timestamp: int  # epoch milliseconds at creation

    def __str__(self) -> str:
        return f"{_LOCAL_PREFIX}{self.timestamp}"


class RemoteId(CycleKeeperBase):
    """Identifier assigned by the remote store."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["remote"] = "remote"
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    def __str__(self) -> str:
        return self.value


CycleId = Annotated[Union[LocalId, RemoteId], Field(discriminator="kind")]


def parse_cycle_id(text: str) -> LocalId | RemoteId:
    """Parse the text form produced by ``str(cycle_id)`` back into an identifier.

    Only used at the HTTP edge, where identifiers travel as path segments.
    """
    if text.startswith(_LOCAL_PREFIX) and text[len(_LOCAL_PREFIX):].isdigit():
        return LocalId(timestamp=int(text[len(_LOCAL_PREFIX):]))
    return RemoteId(value=text)


# ---------- Helpers ----------

def calculate_length(start_date: date, end_date: date) -> int:
    """Cycle length in days, counting both the first and the last day."""
    return (end_date - start_date).days + 1


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


# ---------- Cycle input ----------

class CycleInput(CycleKeeperBase):
    """What the collaborator submits on create and update.

    Any ``length`` in the submitted data is ignored; it is always recomputed
    from the dates.
    """

    model_config = ConfigDict(extra="ignore")

    start_date: date | None = None
    end_date: date | None = None
    flow: Flow = Flow.normal
    symptoms: list[str] = Field(default_factory=list)
    pre_symptoms: list[str] = Field(default_factory=list)
    notes: str = ""

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _blank_date_is_missing(cls, v: Any) -> Any:
        return None if isinstance(v, str) and not v.strip() else v

    @field_validator("flow", mode="before")
    @classmethod
    def _default_flow(cls, v: Any) -> Any:
        return Flow.normal if v in (None, "") else v

    @field_validator("symptoms", "pre_symptoms", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("symptoms", "pre_symptoms")
    @classmethod
    def _as_set(cls, v: list[str]) -> list[str]:
        return _dedupe([s.strip() for s in v])

    @field_validator("notes", mode="before")
    @classmethod
    def _null_notes(cls, v: Any) -> Any:
        return "" if v is None else v

    @classmethod
    def from_data(cls, data: CycleInput | dict[str, Any]) -> CycleInput:
        """Coerce plain collaborator data into a CycleInput.

        Raises:
            ValidationError: If a field has the wrong shape (e.g. a bad date).
        """
        if isinstance(data, CycleInput):
            return data
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            where = ".".join(str(part) for part in first["loc"])
            raise ValidationError(f"{where}: {first['msg']}") from exc

    def validate_for_write(
        self, during: list[str] | None = None, before: list[str] | None = None
    ) -> tuple[date, date]:
        """Check the write-time invariants and return ``(start_date, end_date)``.

        Args:
            during: Allowed "during" symptoms; None skips the check.
            before: Allowed premenstrual symptoms; None skips the check.

        Raises:
            ValidationError: Missing dates, end before start, or unknown symptoms.
        """
        if self.start_date is None or self.end_date is None:
            raise ValidationError("Start and end dates are required")
        if self.end_date < self.start_date:
            raise ValidationError("End date must be on or after the start date")
        if during is not None:
            unknown = [s for s in self.symptoms if s not in during]
            if unknown:
                raise ValidationError(f"Unknown symptoms: {', '.join(unknown)}")
        if before is not None:
            unknown = [s for s in self.pre_symptoms if s not in before]
            if unknown:
                raise ValidationError(f"Unknown premenstrual symptoms: {', '.join(unknown)}")
        return self.start_date, self.end_date


# ---------- Cycle record ----------

class CycleRecord(CycleKeeperBase):
    """One logged cycle as held in the canonical collection.

    ``end_date >= start_date`` is enforced when the record is written, not
    when a stored snapshot is read back.
    """

    id: CycleId
    start_date: date
    end_date: date
    flow: Flow = Flow.normal
    symptoms: list[str] = Field(default_factory=list)
    pre_symptoms: list[str] = Field(default_factory=list)
    notes: str = ""
    length: int
    pending_sync: bool = False

    @field_validator("flow", mode="before")
    @classmethod
    def _default_flow(cls, v: Any) -> Any:
        return Flow.normal if v in (None, "") else v

    @field_validator("symptoms", "pre_symptoms", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("notes", mode="before")
    @classmethod
    def _null_notes(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def is_local(self) -> bool:
        return isinstance(self.id, LocalId)

    @classmethod
    def from_input(
        cls, cycle_id: LocalId | RemoteId, payload: CycleInput, *, pending_sync: bool = False
    ) -> CycleRecord:
        """Build a record from validated input, recomputing ``length``."""
        start_date, end_date = payload.validate_for_write()
        return cls(
            id=cycle_id,
            start_date=start_date,
            end_date=end_date,
            flow=payload.flow,
            symptoms=list(payload.symptoms),
            pre_symptoms=list(payload.pre_symptoms),
            notes=payload.notes,
            length=calculate_length(start_date, end_date),
            pending_sync=pending_sync,
        )


# ---------- Collection (de)serialization ----------

_collection_adapter = TypeAdapter(list[CycleRecord])


def dump_collection(records: list[CycleRecord], *, indent: int | None = None) -> bytes:
    """Serialize a collection to JSON in canonical (camelCase) field names."""
    return _collection_adapter.dump_json(records, by_alias=True, indent=indent)


def parse_collection(data: bytes | str) -> list[CycleRecord]:
    """Deserialize JSON produced by ``dump_collection``.

    Raises:
        pydantic.ValidationError: If the payload is not a valid collection.
    """
    return _collection_adapter.validate_json(data)
