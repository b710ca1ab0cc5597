"""Signature drawing surface and capture form."""

from contractmark.signature.capture import SignatureCapture
from contractmark.signature.pad import SignaturePad

__all__ = ["SignatureCapture", "SignaturePad"]
