"""User-facing refusals raised by the annotation and signature flows.

Every error here is handled synchronously where the user triggered it: the
page shows ``notice`` as a blocking warning and nothing is mutated or sent
to the host application.

Duplicate-substring offset resolution (first occurrence wins) is a known
hazard of ``HighlightResolver.build_highlight`` but is never raised.
"""

from __future__ import annotations


class ContractMarkError(Exception):
    """Base class for refusals surfaced to the user."""

    notice = "İşlem tamamlanamadı."

    def __init__(self, notice: str | None = None) -> None:
        if notice is not None:
            self.notice = notice
        super().__init__(self.notice)


class EmptySelection(ContractMarkError):
    """Highlight requested with nothing (or only whitespace) selected."""

    notice = "Lütfen vurgulamak istediğiniz metni seçin."


class MissingComment(ContractMarkError):
    """Comment submitted with empty text; the dialog stays open."""

    notice = "Lütfen bir açıklama girin."


class MissingSignerName(ContractMarkError):
    """Signature saved or previewed without a signer name."""

    notice = "Lütfen adınızı girin."


class EmptyCanvas(ContractMarkError):
    """Signature saved or previewed without any drawn strokes."""

    notice = "Lütfen imzanızı atın."
