"""
Diagnostic generation for the leofold LSP.

This module converts lexer, parser and constant folding errors into
LSP-compatible diagnostic messages for display in editors.
"""

from lsprotocol import types

from leofold.compiler import fold_constants, parse_source
from leofold.utils.errors import FoldError, LeoFoldError


class DiagnosticProvider:
    """
    Generates LSP diagnostics from Leo source code.

    This provider runs the lexer and parser, then the constant folder, and
    collects every error it reports. A syntax error stops the analysis
    since there is no tree to fold.
    """

    def __init__(self, source: str, uri: str) -> None:
        """
        Initialize the diagnostic provider.

        Args:
            source: The Leo source code to analyze
            uri: The document URI for location information
        """
        self.source = source
        self.uri = uri
        self._diagnostics: list[types.Diagnostic] = []

    def get_diagnostics(self) -> list[types.Diagnostic]:
        """
        Get all diagnostics for the document.

        Returns:
            List of LSP diagnostic objects
        """
        self._diagnostics = []

        # Phase 1: Lexer and parser errors
        try:
            program = parse_source(self.source, self.uri)
        except LeoFoldError as e:
            self._add_syntax_error(e)
            return self._diagnostics

        # Phase 2: Constant folding errors, one per failing statement
        result = fold_constants(program)
        for error in result.errors:
            self._add_fold_error(error)

        return self._diagnostics

    def _add_syntax_error(self, error: LeoFoldError) -> None:
        """
        Add a lexer or parser error as an LSP diagnostic.

        Args:
            error: The compiler error
        """
        line = 0
        character = 0

        if error.location:
            line = max(0, error.location.line - 1)  # Convert to 0-indexed
            character = max(0, error.location.column - 1)

        # Underline to the end of the offending token where the line is known
        end_character = character + 1
        if error.source_line:
            rest_of_line = error.source_line[character:]
            for i, c in enumerate(rest_of_line):
                if c.isspace() or c in "()[]{},:;":
                    end_character = character + max(1, i)
                    break
            else:
                end_character = character + max(1, len(rest_of_line))

        self._diagnostics.append(
            types.Diagnostic(
                range=types.Range(
                    start=types.Position(line=line, character=character),
                    end=types.Position(line=line, character=end_character),
                ),
                message=error.message,
                severity=types.DiagnosticSeverity.Error,
                source="leofold",
            )
        )

    def _add_fold_error(self, error: FoldError) -> None:
        """
        Add a constant folding error as an LSP diagnostic.

        The range covers the rest of the line the failing expression starts
        on.

        Args:
            error: The fold error
        """
        line = 0
        character = 0

        if error.location:
            line = max(0, error.location.line - 1)
            character = max(0, error.location.column - 1)

        lines = self.source.splitlines()
        end_character = character + 1
        if line < len(lines):
            end_character = max(end_character, len(lines[line].rstrip()))

        self._diagnostics.append(
            types.Diagnostic(
                range=types.Range(
                    start=types.Position(line=line, character=character),
                    end=types.Position(line=line, character=end_character),
                ),
                message=str(error),
                severity=types.DiagnosticSeverity.Error,
                source="leofold",
                code=error.kind.name.lower(),
            )
        )


def get_diagnostics_for_document(source: str, uri: str) -> list[types.Diagnostic]:
    """
    Convenience function to get diagnostics for a document.

    Args:
        source: The Leo source code
        uri: The document URI

    Returns:
        List of LSP diagnostics
    """
    provider = DiagnosticProvider(source, uri)
    return provider.get_diagnostics()
