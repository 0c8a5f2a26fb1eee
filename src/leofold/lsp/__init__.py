"""
leofold Language Server Protocol (LSP) implementation.

This package provides a small LSP server for Leo files, enabling:
- Error diagnostics (syntax errors and constant folding failures)
- Document formatting

Usage:
    # Start the LSP server (stdio mode)
    leofold-lsp

    # Or run as a module
    python -m leofold.lsp
"""

from leofold.lsp.server import LeoFoldLanguageServer, create_server, main

__all__ = [
    "LeoFoldLanguageServer",
    "create_server",
    "main",
]
