"""Minimal LSP server for Julia: diagnostics, formatting and function symbols."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DOCUMENT_SYMBOL,
    TEXT_DOCUMENT_FORMATTING,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentFormattingParams,
    DocumentSymbol,
    DocumentSymbolParams,
    FormattingOptions,
    Position,
    PublishDiagnosticsParams,
    Range,
    SymbolKind,
    TextDocumentSyncKind,
    TextEdit,
)
from pygls.lsp.server import LanguageServer

from jlindent import __version__
from jlindent.classifier import ClassificationCache
from jlindent.defun import Definition, definitions
from jlindent.errors import check
from jlindent.indent import reindent
from jlindent.source import Source
from jlindent.tokens import Span

server = LanguageServer("jlindent-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)

# One classification per open document; full-sync edits re-scan only past the change
_caches: dict[str, ClassificationCache] = {}


def _spans(uri: str, text: str) -> list[Span]:
    return _caches.setdefault(uri, ClassificationCache()).classify(text)


def _position(source: Source, offset: int) -> Position:
    pos = source.position(offset)
    return Position(line=pos.line - 1, character=pos.column - 1)


def _validate(ls: LanguageServer, uri: str) -> None:
    """Check the document's structure and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    diagnostics: list[Diagnostic] = []

    for problem in check(doc.source, _spans(uri, doc.source)):
        line = problem.position.line - 1
        col = problem.position.column - 1
        severity = (
            DiagnosticSeverity.Warning if problem.severity == "warning" else DiagnosticSeverity.Error
        )
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + problem.length),
                ),
                message=problem.message,
                severity=severity,
                source="jlindent",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


def _format_edits(ls: LanguageServer, uri: str, options: FormattingOptions) -> list[TextEdit]:
    """Return one TextEdit per line whose indentation changes."""
    source = ls.workspace.get_text_document(uri).source
    indent_unit = options.tab_size if options.tab_size >= 1 else 4
    old_lines = source.split("\n")
    new_lines = reindent(source, indent_unit, _spans(uri, source)).split("\n")

    edits: list[TextEdit] = []
    for line, (old, new) in enumerate(zip(old_lines, new_lines)):
        if old == new:
            continue
        old_width = len(old) - len(old.lstrip(" \t"))
        new_width = len(new) - len(new.lstrip(" \t"))
        edits.append(
            TextEdit(
                range=Range(
                    start=Position(line=line, character=0),
                    end=Position(line=line, character=old_width),
                ),
                new_text=new[:new_width],
            )
        )
    return edits


def _document_symbols(ls: LanguageServer, uri: str) -> list[DocumentSymbol]:
    """Return function definitions as a symbol tree."""
    text = ls.workspace.get_text_document(uri).source
    spans = _spans(uri, text)
    source = Source(text, spans)
    roots: list[DocumentSymbol] = []
    parents: list[tuple[Definition, DocumentSymbol]] = []

    for definition in definitions(text, spans):
        start = _position(source, definition.start)
        symbol = DocumentSymbol(
            name=definition.name or "<anonymous>",
            kind=SymbolKind.Function,
            range=Range(start=start, end=_position(source, definition.end)),
            selection_range=Range(start=start, end=start),
            children=[],
        )
        while parents and parents[-1][0].depth >= definition.depth:
            parents.pop()
        if parents:
            parents[-1][1].children.append(symbol)
        else:
            roots.append(symbol)
        parents.append((definition, symbol))
    return roots


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: LanguageServer, params: DidCloseTextDocumentParams) -> None:
    _caches.pop(params.text_document.uri, None)


@server.feature(TEXT_DOCUMENT_FORMATTING)
def formatting(ls: LanguageServer, params: DocumentFormattingParams) -> list[TextEdit]:
    return _format_edits(ls, params.text_document.uri, params.options)


@server.feature(TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(ls: LanguageServer, params: DocumentSymbolParams) -> list[DocumentSymbol]:
    return _document_symbols(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
