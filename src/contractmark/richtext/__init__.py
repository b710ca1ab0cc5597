"""Rich-text engine capability and its pycrdt-backed implementation."""

from contractmark.richtext.document import ContractDocument
from contractmark.richtext.ranges import AttributeRun, TextRange

__all__ = ["AttributeRun", "ContractDocument", "TextRange"]
