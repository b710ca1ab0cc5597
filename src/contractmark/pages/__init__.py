"""NiceGUI pages for ContractMark.

Import this module to register all page routes with NiceGUI.
"""

from contractmark.pages import contract_editor

__all__ = ["contract_editor"]

# These imports register @ui.page decorators as a side effect.
_PAGES = (contract_editor,)
