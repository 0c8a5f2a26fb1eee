"""
leofold Language Server Protocol (LSP) Server.

This module implements an LSP server for Leo files using pygls. It
provides:

- Document synchronization (open, change, save, close)
- Diagnostics (syntax errors, constant folding errors)
- Document formatting

Usage:
    # Start the server in stdio mode (for IDE integration)
    leofold-lsp

    # Start in TCP mode (for debugging)
    leofold-lsp --tcp --port 2087
"""

import argparse
import logging

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from leofold import __version__
from leofold.formatter import format_source
from leofold.lsp.diagnostics import get_diagnostics_for_document
from leofold.utils.errors import LeoFoldError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("leofold-lsp")


class LeoFoldLanguageServer(LanguageServer):
    """
    Language Server Protocol implementation for Leo files.

    Each change re-runs the parser and constant folder over the whole
    document and republishes the resulting diagnostics.
    """

    def __init__(self) -> None:
        """Initialize the leofold language server."""
        super().__init__(
            name="leofold-lsp",
            version=f"v{__version__}",
        )

        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register all LSP request and notification handlers."""
        # Document synchronization
        self.feature(types.TEXT_DOCUMENT_DID_OPEN)(self._on_did_open)
        self.feature(types.TEXT_DOCUMENT_DID_CHANGE)(self._on_did_change)
        self.feature(types.TEXT_DOCUMENT_DID_SAVE)(self._on_did_save)
        self.feature(types.TEXT_DOCUMENT_DID_CLOSE)(self._on_did_close)

        # Formatting
        self.feature(types.TEXT_DOCUMENT_FORMATTING)(self._on_formatting)

    def _validate(self, uri: str, source: str) -> None:
        """Analyze a document and publish its diagnostics."""
        diagnostics = get_diagnostics_for_document(source, uri)
        logger.debug(f"{len(diagnostics)} diagnostic(s) for {uri}")
        self._publish_diagnostics(uri, diagnostics)

    def _publish_diagnostics(self, uri: str, diagnostics: list[types.Diagnostic]) -> None:
        """Publish diagnostics to the client."""
        self.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
        )

    # =========================================================================
    # Document Synchronization
    # =========================================================================

    def _on_did_open(self, params: types.DidOpenTextDocumentParams) -> None:
        """Handle document open notification."""
        document = params.text_document
        logger.info(f"Document opened: {document.uri}")
        self._validate(document.uri, document.text)

    def _on_did_change(self, params: types.DidChangeTextDocumentParams) -> None:
        """Handle document change notification."""
        uri = params.text_document.uri

        doc = self.workspace.get_text_document(uri)
        if doc is None:
            return

        logger.debug(f"Document changed: {uri}")
        self._validate(uri, doc.source)

    def _on_did_save(self, params: types.DidSaveTextDocumentParams) -> None:
        """Handle document save notification."""
        uri = params.text_document.uri
        logger.info(f"Document saved: {uri}")

        doc = self.workspace.get_text_document(uri)
        if doc:
            self._validate(uri, doc.source)

    def _on_did_close(self, params: types.DidCloseTextDocumentParams) -> None:
        """Handle document close notification."""
        uri = params.text_document.uri
        logger.info(f"Document closed: {uri}")

        # Clear diagnostics
        self._publish_diagnostics(uri, [])

    # =========================================================================
    # Formatting
    # =========================================================================

    def _on_formatting(
        self, params: types.DocumentFormattingParams
    ) -> list[types.TextEdit] | None:
        """Handle document formatting request with a single whole-document edit."""
        uri = params.text_document.uri

        doc = self.workspace.get_text_document(uri)
        if doc is None:
            return None

        return format_document_edits(doc.source)


def format_document_edits(source: str) -> list[types.TextEdit] | None:
    """
    Build the edits that replace ``source`` with its formatted form.

    Returns:
        An empty list if already formatted, None if the source does not parse
    """
    try:
        formatted = format_source(source)
    except LeoFoldError as e:
        logger.debug(f"Formatting skipped: {e}")
        return None

    if formatted == source:
        return []

    lines = source.split("\n")
    return [
        types.TextEdit(
            range=types.Range(
                start=types.Position(line=0, character=0),
                end=types.Position(line=len(lines) - 1, character=len(lines[-1])),
            ),
            new_text=formatted,
        )
    ]


# =============================================================================
# Server Creation and Main Entry Point
# =============================================================================


def create_server() -> LeoFoldLanguageServer:
    """Create and configure a leofold language server instance."""
    server = LeoFoldLanguageServer()

    @server.feature(types.INITIALIZED)
    def on_initialized(
        params: types.InitializedParams,  # noqa: ARG001
    ) -> None:
        """Handle initialized notification."""
        logger.info("leofold Language Server initialized successfully")

    @server.feature(types.SHUTDOWN)
    def on_shutdown(
        params: None,  # noqa: ARG001
    ) -> None:
        """Handle shutdown request."""
        logger.info("Shutting down leofold Language Server")

    return server


def main() -> None:
    """
    Main entry point for the leofold language server.

    Starts the server in stdio mode for IDE integration.
    """
    parser = argparse.ArgumentParser(
        description="leofold Language Server",
        prog="leofold-lsp",
    )
    parser.add_argument(
        "--tcp",
        action="store_true",
        help="Start server in TCP mode instead of stdio",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to in TCP mode (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=2087,
        help="Port to listen on in TCP mode (default: 2087)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Logging level (default: info)",
    )

    args = parser.parse_args()

    # Configure logging level
    log_level = getattr(logging, args.log_level.upper())
    logging.getLogger("leofold-lsp").setLevel(log_level)

    server = create_server()

    if args.tcp:
        logger.info(f"Starting leofold LSP in TCP mode on {args.host}:{args.port}")
        server.start_tcp(args.host, args.port)
    else:
        logger.info("Starting leofold LSP in stdio mode")
        server.start_io()


if __name__ == "__main__":
    main()
