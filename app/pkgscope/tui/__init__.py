"""Terminal dashboard for pkgscope.

This package contains the textual application, key translation, and the
rich renderer.
"""

from pkgscope.tui.app import run

__all__ = ["run"]
