from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ListType(str, Enum):
    """
    Record category; selects the destination sheet and the form field set.
    """

    CONTROL = "control"
    ALARM = "alarm"
    DAMAGED = "damaged"
    PARAM = "param"

    @classmethod
    def parse(cls, value: str) -> Optional["ListType"]:
        try:
            return cls(value)
        except ValueError:
            return None


class _RecordBase(BaseModel):
    # Sheets add columns over time; unknown keys are carried through to the script.
    model_config = ConfigDict(extra="allow")

    def to_payload(self) -> dict[str, Any]:
        """
        Flatten to JSON scalars, dropping the union tag.
        """
        return self.model_dump(mode="json", exclude={"kind"})


class ControlRecord(_RecordBase):
    """
    Control request raised against a line/machine.
    """

    kind: Literal["control"] = "control"
    targetLine: str = Field("2-1", description="Target line")
    machine: str = Field("TW", description="Machine (All/TW/CA/EL)")
    symptom: str = ""
    requester: str = ""
    requestDetail: str = ""
    actionDetail: str = ""
    completed: str = Field("미완료", description="Completion status")


class AlarmRecord(_RecordBase):
    """
    Alarm action history row (sheet columns C..M).
    """

    kind: Literal["alarm"] = "alarm"
    actionDate: str = Field("", description="YYYY-MM-DD")
    startTime: str = Field("", description="HH:MM")
    endTime: str = Field("", description="HH:MM")
    targetLine: str = "1-1호기"
    machine: str = "TW"
    alarmCode: str = ""
    symptom: str = ""
    reason: str = ""
    actionDetail: str = ""
    actioner: str = ""
    status: str = ""


class DamagedRecord(_RecordBase):
    """
    Damaged item report (sheet columns C..I).
    """

    kind: Literal["damaged"] = "damaged"
    damagedLine: str = "1-1호기"
    item: str = ""
    modelNumber: str = ""
    reason: str = ""
    quantity: str = ""
    supplyMethod: str = ""
    spare: str = ""


class ParamRecord(_RecordBase):
    """
    Parameter change log entry.
    """

    kind: Literal["param"] = "param"
    targetLine: str = "1-1호기"
    machine: str = "TW"
    unit: str = "Loader"
    category: str = "티칭값 변경"
    assy: str = ""
    actionTime: str = Field("", description="YYYY-MM-DDTHH:MM (datetime-local)")
    requester: str = ""
    actioner: str = ""
    parameterName: str = ""
    before: str = ""
    after: str = ""
    reason: str = ""


Record = Annotated[
    Union[ControlRecord, AlarmRecord, DamagedRecord, ParamRecord],
    Field(discriminator="kind"),
]

RECORD_MODELS: dict[ListType, type[_RecordBase]] = {
    ListType.CONTROL: ControlRecord,
    ListType.ALARM: AlarmRecord,
    ListType.DAMAGED: DamagedRecord,
    ListType.PARAM: ParamRecord,
}

_RECORD_ADAPTER: TypeAdapter[Any] = TypeAdapter(Record)


def parse_record(list_type: ListType, values: Mapping[str, Any]) -> _RecordBase:
    """
    Build the typed record for `list_type`, dispatching on the union tag.
    """
    return _RECORD_ADAPTER.validate_python({**values, "kind": list_type.value})
