"""
Entry point for running the leofold LSP server as a module.

Usage:
    python -m leofold.lsp
    python -m leofold.lsp --tcp --port 2087
"""

from leofold.lsp.server import main

if __name__ == "__main__":
    main()
