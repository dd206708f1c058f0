from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pyperclip
import pytest
import requests

from esstforms.errors import ApplicationError
from esstforms.forms import FORMS, FlowState, FormFlow, copy_text
from esstforms.forms.clipboard import CLIPBOARD_BLOCKED_MESSAGE
from esstforms.schemas import ListType
from esstforms.timefmt import format_korean_long

# 2025-12-03 19:05 UTC == 14:05 in Toronto (EST)
CAPTURED = datetime(2025, 12, 3, 19, 5, tzinfo=timezone.utc)


class RecordingClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[ListType, dict[str, Any]]] = []

    def submit(self, list_type: ListType, payload: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((list_type, payload))
        if self.error is not None:
            raise self.error
        return {"status": "success"}


class Clipboard:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.texts: list[str] = []

    def __call__(self, text: str) -> None:
        if self.fail:
            raise pyperclip.PyperclipException("no clipboard mechanism")
        self.texts.append(text)


def _filled_damaged() -> FormFlow:
    flow = FormFlow(FORMS[ListType.DAMAGED])
    for name, value in {
        "item": "Gripper pad",
        "modelNumber": "GP-200",
        "reason": "drop",
        "quantity": "2",
        "supplyMethod": "Spare",
    }.items():
        flow.set_field(name, value)
    return flow


def _filled_param() -> FormFlow:
    flow = FormFlow(FORMS[ListType.PARAM])
    for name, value in {
        "machine": "CA",
        "assy": " Forming ",
        "actionTime": "2025-12-03T14:05",
        "requester": "Kim",
        "actioner": "Lee",
        "parameterName": "Z offset",
        "before": "1.20",
        "after": "1.25",
        "reason": "misalignment",
    }.items():
        flow.set_field(name, value)
    return flow


def test_korean_long_timestamp() -> None:
    assert format_korean_long(CAPTURED) == "2025년 12월 3일 오후 2:05"
    assert format_korean_long(datetime(2025, 7, 1, 4, 0, tzinfo=timezone.utc)) == "2025년 7월 1일 오전 12:00"


def test_defaults_come_from_record_models() -> None:
    flow = FormFlow(FORMS[ListType.PARAM])
    assert flow.values["machine"] == "TW"
    assert flow.values["unit"] == "Loader"
    assert flow.values["category"] == "티칭값 변경"
    assert FormFlow(FORMS[ListType.CONTROL]).values["completed"] == "미완료"


def test_first_failing_rule_wins() -> None:
    flow = FormFlow(FORMS[ListType.DAMAGED])
    flow.set_field("item", "Gripper")
    flow.set_field("quantity", "")

    assert flow.generate_preview() is None
    assert flow.state is FlowState.EDITING
    assert flow.message == "형번을 입력해주세요. (Please enter the model number.)"
    assert flow.preview_text is None


def test_whitespace_only_is_empty() -> None:
    flow = _filled_damaged()
    flow.set_field("supplyMethod", "   ")

    assert flow.generate_preview() is None
    assert "수급 방법" in flow.message


def test_preview_substitutes_placeholder_and_timestamp() -> None:
    flow = FormFlow(FORMS[ListType.CONTROL])
    flow.set_field("symptom", " Conveyor stop ")
    flow.set_field("requester", "Park")
    flow.set_field("requestDetail", "Check sensor")

    text = flow.generate_preview(now=CAPTURED)

    assert flow.state is FlowState.PREVIEW_READY
    assert text == "\n".join(
        [
            "[제어 요청 공유] [Control Request Sharing]",
            "■ 시간(Time) : 2025년 12월 3일 오후 2:05",
            "■ 대상 호기(Line) : 2-1",
            "■ Machine : TW",
            "■ 현상(Symptom) : Conveyor stop",
            "■ 요청자(Requester) : Park",
            "■ 요청 내용(Request Detail) : Check sensor",
            "■ 조치(Action Detail) : -",
        ]
    )


def test_alarm_preview_format() -> None:
    flow = FormFlow(FORMS[ListType.ALARM])
    for name, value in {
        "actionDate": "2025-12-03",
        "startTime": "09:10",
        "endTime": "09:40",
        "alarmCode": "A-301",
        "symptom": "Vacuum low",
        "reason": "Leak",
        "actionDetail": "Replaced hose",
        "actioner": "Choi",
    }.items():
        flow.set_field(name, value)

    text = flow.generate_preview(now=CAPTURED)

    assert text.splitlines() == [
        "■호기: 1-1호기 TW",
        "■일시: 12/03(09:10~09:40)",
        "■현상: [A-301] Vacuum low",
        "■원인: Leak",
        "■조치사항: Replaced hose",
        "■조치인원: Choi",
    ]


def test_editing_clears_status_and_message() -> None:
    flow = _filled_damaged()
    flow.submit(RecordingClient(ApplicationError("Sheet is protected", 200)), writer=Clipboard())
    assert flow.state is FlowState.FAILED

    flow.set_field("item", "Pad")

    assert flow.state is FlowState.EDITING
    assert flow.message == ""


def test_invalid_preview_stays_in_editing() -> None:
    flow = FormFlow(FORMS[ListType.DAMAGED])

    assert flow.generate_preview() is None

    assert flow.state is FlowState.EDITING
    assert flow.message == "품목을 입력해주세요. (Please enter the item.)"


def test_invalid_edit_after_preview_hides_it() -> None:
    flow = _filled_damaged()
    assert flow.generate_preview(now=CAPTURED) is not None
    assert flow.state is FlowState.PREVIEW_READY

    flow.set_field("quantity", " ")

    assert flow.generate_preview(now=CAPTURED) is None
    assert flow.state is FlowState.EDITING
    assert flow.message == "수량을 입력해주세요. (Please enter the quantity.)"
    assert flow.preview_text is None


def test_unknown_field_is_rejected() -> None:
    with pytest.raises(KeyError):
        FormFlow(FORMS[ListType.ALARM]).set_field("damagedReason", "x")


def test_param_machine_change_resets_unit_and_assy() -> None:
    flow = FormFlow(FORMS[ListType.PARAM])
    flow.set_field("assy", "Loader arm")

    flow.set_field("machine", "EL")

    assert flow.values["unit"] == "Cell Loader"
    assert flow.values["assy"] == ""


def test_submit_success_resets_and_copies() -> None:
    flow = _filled_damaged()
    flow.generate_preview(now=CAPTURED)
    client = RecordingClient()
    clipboard = Clipboard()

    assert flow.submit(client, writer=clipboard) is True

    assert flow.state is FlowState.SUCCEEDED
    assert flow.message == FORMS[ListType.DAMAGED].success_message
    assert flow.values == FORMS[ListType.DAMAGED].defaults()
    assert flow.preview_text is None
    list_type, payload = client.calls[0]
    assert list_type is ListType.DAMAGED
    assert payload["reason"] == "drop"
    assert "kind" not in payload
    assert clipboard.texts[0].startswith("[파손품 조치 이력 공유]")


def test_submit_revalidates() -> None:
    flow = _filled_damaged()
    flow.generate_preview()
    flow.values["item"] = ""
    client = RecordingClient()

    assert flow.submit(client, writer=Clipboard()) is False
    assert flow.state is FlowState.EDITING
    assert flow.message == "품목을 입력해주세요. (Please enter the item.)"
    assert flow.preview_text is None
    assert client.calls == []


def test_clipboard_failure_does_not_block_upload() -> None:
    flow = _filled_damaged()
    client = RecordingClient()

    assert flow.submit(client, writer=Clipboard(fail=True)) is True
    assert len(client.calls) == 1


def test_control_submit_does_not_copy() -> None:
    flow = FormFlow(FORMS[ListType.CONTROL])
    flow.set_field("symptom", "stop")
    flow.set_field("requester", "Park")
    flow.set_field("requestDetail", "check")
    clipboard = Clipboard()

    assert flow.submit(RecordingClient(), writer=clipboard) is True
    assert clipboard.texts == []


def test_control_copy_button_failure_is_an_error_state() -> None:
    flow = FormFlow(FORMS[ListType.CONTROL])
    flow.set_field("symptom", "stop")
    flow.set_field("requester", "Park")
    flow.set_field("requestDetail", "check")
    assert flow.generate_preview() is not None

    result = flow.copy_preview(writer=Clipboard(fail=True))

    assert result.ok is False
    assert flow.state is FlowState.FAILED
    assert flow.message == CLIPBOARD_BLOCKED_MESSAGE


@pytest.mark.parametrize(
    "error, message",
    [
        (ApplicationError("Sheet is protected", 200), "Sheet is protected"),
        (requests.ConnectionError("connection refused"), "connection refused"),
    ],
)
def test_submit_failure_shows_message_verbatim(error: Exception, message: str) -> None:
    flow = _filled_damaged()

    assert flow.submit(RecordingClient(error), writer=Clipboard()) is False

    assert flow.state is FlowState.FAILED
    assert flow.message == message
    assert flow.values["item"] == "Gripper pad"


def test_submit_while_in_flight_is_refused() -> None:
    flow = _filled_damaged()
    flow.state = FlowState.SUBMITTING
    client = RecordingClient()

    assert flow.submit(client, writer=Clipboard()) is False
    assert client.calls == []


def test_param_payload_is_trimmed_and_time_converted() -> None:
    flow = _filled_param()
    client = RecordingClient()

    assert flow.submit(client, writer=Clipboard()) is True

    payload = client.calls[0][1]
    assert payload["assy"] == "Forming"
    assert payload["actionTime"] == "2025-12-03 14:05:00"
    assert payload["unit"] == "Cell Loader"


def test_param_preview_shows_space_separated_time() -> None:
    flow = _filled_param()

    text = flow.generate_preview(now=CAPTURED)

    assert "■변경 시간(Changed Time) : 2025-12-03 14:05" in text
    assert "■Ass'y : Forming" in text


def test_copy_text_reports_success() -> None:
    clipboard = Clipboard()

    result = copy_text("hello", clipboard)

    assert result.ok is True
    assert clipboard.texts == ["hello"]
