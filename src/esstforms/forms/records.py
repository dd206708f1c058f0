"""
Field sets, validation messages and preview templates for the four sheets.

Field order is validation order. Preview templates follow the share-message
formats the maintenance team posts to the group chat.
"""

from __future__ import annotations

from datetime import datetime
from typing import Mapping

from esstforms.schemas import ListType
from esstforms.timefmt import format_korean_long

from .schema import FieldSpec, FormSchema, FormValues, display, trim_values

LINES = ("1-1호기", "1-2호기", "2-1호기", "2-2호기", "3-1호기", "3-2호기")
CONTROL_LINES = ("1-1", "1-2", "2-1", "2-2", "3-1", "3-2")
MACHINES = ("TW", "CA", "EL")

# Machine -> units, first entry is the default after a machine change.
UNIT_OPTIONS: dict[str, tuple[str, ...]] = {
    "TW": ("Loader", "Conveyor", "Tab Welder", "Lead Supply", "LMS"),
    "CA": ("Cell Loader", "Al Forming", "Cell Assy"),
    "EL": ("Cell Loader", "EL Filling", "Cell Unloader"),
}
PARAM_CATEGORIES = ("티칭값 변경", "기구물 조정", "세팅값 조정")

UPLOADED_AND_COPIED = "업로드 및 클립보드에 Text 가 복사 되었습니다. (Uploaded and copied to clipboard.)"


# -----------------------------------------------------------------------------
# Control request
# -----------------------------------------------------------------------------


def _control_preview(f: Mapping[str, str], now: datetime) -> str:
    return "\n".join(
        [
            "[제어 요청 공유] [Control Request Sharing]",
            f"■ 시간(Time) : {format_korean_long(now)}",
            f"■ 대상 호기(Line) : {display(f.get('targetLine'))}",
            f"■ Machine : {display(f.get('machine'))}",
            f"■ 현상(Symptom) : {display(f.get('symptom'))}",
            f"■ 요청자(Requester) : {display(f.get('requester'))}",
            f"■ 요청 내용(Request Detail) : {display(f.get('requestDetail'))}",
            f"■ 조치(Action Detail) : {display(f.get('actionDetail'))}",
        ]
    )


CONTROL_FORM = FormSchema(
    list_type=ListType.CONTROL,
    title="ESST 제어 요청 Form (Control Request Form)",
    fields=(
        FieldSpec(
            "targetLine",
            "대상 호기(Line)",
            True,
            "대상 호기를 선택해주세요. (Please select the line.)",
            CONTROL_LINES,
        ),
        FieldSpec(
            "machine",
            "Machine",
            True,
            "Machine을 선택해주세요. (Please select the machine.)",
            ("All",) + MACHINES,
        ),
        FieldSpec(
            "symptom",
            "현상(Symptom)",
            True,
            "현상을 입력해주세요. (Please enter the symptom.)",
            multiline=True,
        ),
        FieldSpec(
            "requester", "요청자(Requester)", True, "요청자를 입력해주세요. (Please enter the requester.)"
        ),
        FieldSpec(
            "requestDetail",
            "요청 내용(Request Detail)",
            True,
            "요청 내용을 입력해주세요. (Please enter the request detail.)",
            multiline=True,
        ),
        FieldSpec("actionDetail", "조치 내용(Action Detail)", multiline=True),
        FieldSpec("completed", "완료 여부(Completion Status)", choices=("미완료", "완료")),
    ),
    preview=_control_preview,
    # Control copies through its own button, not as part of the upload.
    copy_on_submit=False,
)


# -----------------------------------------------------------------------------
# Alarm action
# -----------------------------------------------------------------------------


def _mmdd(date_string: str) -> str:
    if not date_string:
        return ""
    parts = date_string.split("-")
    if len(parts) != 3:
        return date_string
    return f"{parts[1]}/{parts[2]}"


def _alarm_preview(f: Mapping[str, str], now: datetime) -> str:
    # The alarm share format carries no capture time.
    return "\n".join(
        [
            f"■호기: {display(f.get('targetLine'))} {display(f.get('machine'))}",
            f"■일시: {_mmdd(f.get('actionDate', ''))}"
            f"({f.get('startTime', '')}~{f.get('endTime', '')})",
            f"■현상: [{display(f.get('alarmCode'))}] {display(f.get('symptom'))}",
            f"■원인: {display(f.get('reason'))}",
            f"■조치사항: {display(f.get('actionDetail'))}",
            f"■조치인원: {display(f.get('actioner'))}",
        ]
    )


ALARM_FORM = FormSchema(
    list_type=ListType.ALARM,
    title="ESST Alarm 조치 이력 Form (ESST Alarm Action History Sharing Form)",
    fields=(
        FieldSpec("actionDate", "일자(Date)", True, "일자를 선택해주세요. (Please select the date)"),
        FieldSpec(
            "startTime",
            "시작 시간(Start Time)",
            True,
            "시작 시간을 선택해주세요. (Please select the start time)",
        ),
        FieldSpec(
            "endTime",
            "종료 시간(End Time)",
            True,
            "종료 시간을 선택해주세요. (Please select the end time)",
        ),
        FieldSpec(
            "targetLine",
            "대상 호기(Line)",
            True,
            "대상 호기를 선택해주세요. (Please select the line.)",
            LINES,
        ),
        FieldSpec(
            "machine",
            "Machine",
            True,
            "Machine 을 선택해주세요. (Please select the machine.)",
            MACHINES,
        ),
        FieldSpec(
            "alarmCode",
            "알람 코드(Alarm Code)",
            True,
            "알람 코드를 입력해주세요. (Please enter the alarm code.)",
        ),
        FieldSpec(
            "symptom",
            "현상(Symptom)",
            True,
            "현상을 입력해주세요. (Please enter the symptom.)",
            multiline=True,
        ),
        FieldSpec(
            "reason",
            "원인(Cause)",
            True,
            "원인을 입력해주세요. (Please enter the cause.)",
            multiline=True,
        ),
        FieldSpec(
            "actionDetail",
            "조치 내용(Action Detail)",
            True,
            "조치 사항을 입력해주세요. (Please enter the action details.)",
            multiline=True,
        ),
        FieldSpec(
            "actioner",
            "조치 인원(Person In Charge)",
            True,
            "조치 인원을 입력해주세요. (Please enter the person in charge.)",
        ),
        FieldSpec("status", "완료 여부(Completion Status)"),
    ),
    preview=_alarm_preview,
    success_message=UPLOADED_AND_COPIED,
)


# -----------------------------------------------------------------------------
# Damaged item
# -----------------------------------------------------------------------------


def _damaged_preview(f: Mapping[str, str], now: datetime) -> str:
    return "\n".join(
        [
            "[파손품 조치 이력 공유] [Damaged Item Action History Sharing]",
            f"■시간(Time) : {format_korean_long(now)}",
            f"■파손 호기(Damaged Line) : {display(f.get('damagedLine'))}",
            f"■품목(Item) : {display(f.get('item'))}",
            f"■형번(Model Number) : {display(f.get('modelNumber'))}",
            f"■파손 원인(Reason) : {display(f.get('reason'))}",
            f"■수량(Quantity) : {display(f.get('quantity'))}",
            f"■수급 방법(Supply Method) : {display(f.get('supplyMethod'))}",
        ]
    )


DAMAGED_FORM = FormSchema(
    list_type=ListType.DAMAGED,
    title="ESST 파손품 관리 이력 Form (Damaged Item Action History Sharing Form)",
    fields=(
        FieldSpec(
            "damagedLine",
            "파손 호기(Damaged Line)",
            True,
            "파손 호기를 선택해주세요. (Please select the damaged line.)",
            LINES,
        ),
        FieldSpec(
            "item",
            "품목(Item)",
            True,
            "품목을 입력해주세요. (Please enter the item.)",
            multiline=True,
        ),
        FieldSpec(
            "modelNumber",
            "형번(Model Number)",
            True,
            "형번을 입력해주세요. (Please enter the model number.)",
        ),
        FieldSpec(
            "reason",
            "파손 원인(Cause of the Damage)",
            True,
            "파손 원인을 입력해주세요. (Please enter the cause of the damage.)",
            multiline=True,
        ),
        FieldSpec(
            "quantity", "수량(Quantity)", True, "수량을 입력해주세요. (Please enter the quantity.)"
        ),
        FieldSpec(
            "supplyMethod",
            "수급 방법(Supply Method)",
            True,
            "수급 방법을 입력해주세요. (Please enter the supply method.)",
        ),
        FieldSpec("spare", "Spare 대체 현황(Spare Replacement)"),
    ),
    preview=_damaged_preview,
    success_message=UPLOADED_AND_COPIED,
)


# -----------------------------------------------------------------------------
# Parameter change
# -----------------------------------------------------------------------------


def _preview_time(value: str) -> str:
    if not value or not value.strip():
        return "-"
    return value.replace("T", " ")


def _param_preview(f: Mapping[str, str], now: datetime) -> str:
    return "\n".join(
        [
            "[파라미터 수정사항 공유] [Parameter Change Update]",
            f"■시간(Time) : {format_korean_long(now)}",
            f"■대상 호기(Line) : {display(f.get('targetLine'))}",
            f"■Machine : {display(f.get('machine'))}",
            f"■Category : {display(f.get('category'))}",
            f"■Unit : {display(f.get('unit'))}",
            f"■Ass'y : {display(f.get('assy'))}",
            f"■변경 시간(Changed Time) : {_preview_time(f.get('actionTime', ''))}",
            f"■요청자(Requester) : {display(f.get('requester'))}",
            f"■변경자(Person In Charge) : {display(f.get('actioner'))}",
            f"■변경 Parameter(Changed Parameter) : {display(f.get('parameterName'))}",
            f"■이전 값(Previous Value) : {display(f.get('before'))}",
            f"■변경 값(Changed Value) : {display(f.get('after'))}",
            f"■변경 사유(Reason For The Change) : {display(f.get('reason'))}",
        ]
    )


def _param_prepare(values: Mapping[str, str]) -> dict[str, str]:
    """
    Trim everything and turn datetime-local into the sheet's "YYYY-MM-DD HH:mm:ss".
    """
    cleaned = trim_values(values)
    action_time = cleaned.get("actionTime", "")
    if "T" in action_time:
        action_time = action_time.replace("T", " ") + ":00"
    cleaned["actionTime"] = action_time
    return cleaned


def _param_on_change(values: FormValues, name: str, value: str) -> FormValues:
    if name != "machine":
        return {**values, name: value}
    units = UNIT_OPTIONS.get(value, ())
    return {**values, "machine": value, "unit": units[0] if units else "", "assy": ""}


PARAM_FORM = FormSchema(
    list_type=ListType.PARAM,
    title="ESST Parameter 관리 이력 Form (Parameter Change History Form)",
    fields=(
        FieldSpec(
            "targetLine",
            "대상 호기(Line)",
            True,
            "대상 호기를 선택해주세요. (Please select the line.)",
            LINES,
        ),
        FieldSpec(
            "machine",
            "Machine",
            True,
            "Machine을 선택해주세요. (Please select the machine.)",
            MACHINES,
        ),
        FieldSpec("unit", "Unit", True, "Unit을 선택해주세요. (Please select the unit.)"),
        FieldSpec(
            "category",
            "유형(Category)",
            True,
            "유형을 선택해주세요. (Please select the category.)",
            PARAM_CATEGORIES,
        ),
        FieldSpec("assy", "Ass'y", True, "Ass'y를 입력해주세요. (Please enter the Ass'y.)"),
        FieldSpec(
            "actionTime",
            "변경 시간(Changed Time)",
            True,
            "변경 시간을 입력해주세요. (Please enter the changed time.)",
        ),
        FieldSpec(
            "requester", "요청자(Requester)", True, "요청자를 입력해주세요. (Please enter the requester.)"
        ),
        FieldSpec(
            "actioner",
            "변경자(Person In Charge)",
            True,
            "변경자를 입력해주세요. (Please enter the person in charge.)",
        ),
        FieldSpec(
            "parameterName",
            "변경 Parameter(Changed Parameter)",
            True,
            "변경한 Parameter를 입력해주세요. (Please enter the changed parameter.)",
        ),
        FieldSpec(
            "before",
            "이전 값(Previous Value)",
            True,
            "이전 값을 입력해주세요. (Please enter the previous value.)",
        ),
        FieldSpec(
            "after",
            "변경 값(Changed Value)",
            True,
            "변경 값을 입력해주세요. (Please enter the changed value.)",
        ),
        FieldSpec(
            "reason",
            "변경 사유(Reason For The Change)",
            True,
            "변경 사유를 입력해주세요. (Please enter the reason for the change.)",
            multiline=True,
        ),
    ),
    preview=_param_preview,
    success_message="업로드 및 클립보드 복사 완료 (Uploaded and copied to clipboard.)",
    prepare=_param_prepare,
    on_change=_param_on_change,
    trim_before_validate=True,
)


FORMS: dict[ListType, FormSchema] = {
    ListType.CONTROL: CONTROL_FORM,
    ListType.ALARM: ALARM_FORM,
    ListType.DAMAGED: DAMAGED_FORM,
    ListType.PARAM: PARAM_FORM,
}


def unit_choices(machine: str) -> tuple[str, ...]:
    return UNIT_OPTIONS.get(machine, ())
