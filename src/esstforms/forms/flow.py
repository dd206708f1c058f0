"""
One parameterized form flow shared by every record type.

States:

    EDITING --generate_preview--> PREVIEW_READY --submit--> SUBMITTING
    SUBMITTING --success--> SUCCEEDED      (fields reset to defaults)
    SUBMITTING --error----> FAILED         (message shown verbatim)
    any --set_field--> EDITING             (status and message cleared)
    EDITING --invalid-----> EDITING        (first failing rule shown)

A failed validation stays in EDITING with the first failing rule as the
message and the preview hidden.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import requests

from esstforms.errors import SAVE_FAILED_MESSAGE, EsstFormsError
from esstforms.timefmt import now_site

from .clipboard import ClipboardResult, ClipboardWriter, copy_text
from .schema import FormSchema, FormValues

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    EDITING = "editing"
    PREVIEW_READY = "preview_ready"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FormFlow:
    """
    Holds the state of one form session.

    Attributes:
        schema: Record type definition.
        values: Current field values.
        state: Current FlowState.
        message: Last error or success message ("" when cleared).
        preview_text: Text shown in the preview pane, None while hidden.
    """

    def __init__(self, schema: FormSchema) -> None:
        self.schema = schema
        self.values: FormValues = schema.defaults()
        self.state = FlowState.EDITING
        self.message = ""
        self.preview_text: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.state is FlowState.SUBMITTING

    def set_field(self, name: str, value: str) -> None:
        self.schema.get_field(name)
        if self.schema.on_change is not None:
            self.values = self.schema.on_change(dict(self.values), name, value)
        else:
            self.values[name] = value
        self.state = FlowState.EDITING
        self.message = ""

    def reset(self) -> None:
        self.values = self.schema.defaults()
        self.preview_text = None

    def _fail(self, message: str) -> None:
        self.state = FlowState.FAILED
        self.message = message

    def _invalid(self, message: str) -> None:
        self.state = FlowState.EDITING
        self.message = message
        self.preview_text = None

    def render_preview(self, now: Optional[datetime] = None) -> str:
        return self.schema.preview(self.values, now or now_site())

    def generate_preview(self, now: Optional[datetime] = None) -> Optional[str]:
        """
        Validate and build the preview text.

        Returns:
            The preview text, or None if a required field is empty.
        """
        error = self.schema.validate(self.values)
        if error is not None:
            self._invalid(error.message)
            return None

        self.preview_text = self.render_preview(now)
        self.state = FlowState.PREVIEW_READY
        self.message = ""
        return self.preview_text

    def copy_preview(self, writer: Optional[ClipboardWriter] = None) -> ClipboardResult:
        """
        Copy the current preview to the clipboard (the control form's copy button).
        """
        text = self.preview_text if self.preview_text is not None else self.render_preview()
        result = copy_text(text, writer)
        if result.ok:
            self.message = result.message
        else:
            self._fail(result.message)
        return result

    def submit(
        self,
        client: Any,
        writer: Optional[ClipboardWriter] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Validate again, optionally copy the preview, and POST the record.

        Args:
            client: Anything with `submit(list_type, payload)`, usually FormsApiClient.
            writer: Clipboard writer override.
            now: Capture time for the copied preview.

        Returns:
            True when the destination stored the record.
        """
        if self.busy:
            logger.warning("Ignoring submit while a %s upload is in flight", self.schema.list_type.value)
            return False

        error = self.schema.validate(self.values)
        if error is not None:
            self._invalid(error.message)
            return False

        self.state = FlowState.SUBMITTING
        self.message = ""

        if self.schema.copy_on_submit:
            text = self.preview_text if self.preview_text is not None else self.render_preview(now)
            copied = copy_text(text, writer)
            if not copied.ok:
                logger.warning("Preview not copied for %s; uploading anyway", self.schema.list_type.value)

        try:
            payload = self.schema.payload(self.values)
            client.submit(self.schema.list_type, payload)
        except (EsstFormsError, requests.RequestException) as exc:
            message = getattr(exc, "message", None) or str(exc) or SAVE_FAILED_MESSAGE
            logger.info("Submit %s failed: %s", self.schema.list_type.value, message)
            self._fail(message)
            return False

        self.state = FlowState.SUCCEEDED
        self.message = self.schema.success_message
        self.reset()
        return True
