"""Tests for dialog components.

Note: Full dialog interaction needs a browser. These unit tests verify the
module structure and signatures.
"""

from __future__ import annotations

import inspect


class TestCommentDialog:
    """Tests for show_comment_dialog module structure."""

    def test_function_is_async(self) -> None:
        from contractmark.pages.dialogs import show_comment_dialog

        assert inspect.iscoroutinefunction(show_comment_dialog)

    def test_accepts_resolver(self) -> None:
        from contractmark.pages.dialogs import show_comment_dialog

        params = list(inspect.signature(show_comment_dialog).parameters)
        assert params == ["resolver"]


class TestSignatureDialog:
    """Tests for show_signature_dialog module structure."""

    def test_function_is_async(self) -> None:
        from contractmark.pages.dialogs import show_signature_dialog

        assert inspect.iscoroutinefunction(show_signature_dialog)

    def test_accepts_manager_and_config(self) -> None:
        from contractmark.pages.dialogs import show_signature_dialog

        params = list(inspect.signature(show_signature_dialog).parameters)
        assert params == ["manager", "config"]

    def test_signer_fields_match_model(self) -> None:
        from contractmark.models import SignerInfo
        from contractmark.pages.dialogs import _SIGNER_FIELDS

        assert {name for name, _label in _SIGNER_FIELDS} == set(
            SignerInfo.model_fields
        )
