from .clipboard import ClipboardResult, copy_text
from .flow import FlowState, FormFlow
from .records import FORMS
from .schema import FieldSpec, FormSchema

__all__ = [
    "ClipboardResult",
    "copy_text",
    "FieldSpec",
    "FlowState",
    "FormFlow",
    "FormSchema",
    "FORMS",
]
