"""Document loaders — thin wrappers around LangChain document loaders."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from langchain_community.document_loaders import (
    DirectoryLoader,
    PyPDFLoader,
    TextLoader,
)

from firesafety_rag.retrieval.models import SourceDocument

if TYPE_CHECKING:
    from langchain_core.documents import Document

logger = logging.getLogger(__name__)

LOADERS_BY_SUFFIX = {
    ".txt": TextLoader,
    ".md": TextLoader,
    ".pdf": PyPDFLoader,
}


def load_directory(path: str | Path) -> list[SourceDocument]:
    """Recursively load every supported file under *path*.

    Multi-page files (PDF) are joined back into one document per file so
    that record ids stay ``<file path>_<chunk index>``.

    Parameters
    ----------
    path:
        Root directory containing source documents.

    Returns
    -------
    list[SourceDocument]
        One document per file, ordered by path.
    """
    root = Path(path)
    if not root.is_dir():
        raise FileNotFoundError(f"Documents directory not found: {root}")

    pages: list[Document] = []
    for suffix, loader_cls in LOADERS_BY_SUFFIX.items():
        loader = DirectoryLoader(
            str(root),
            glob=f"**/*{suffix}",
            loader_cls=loader_cls,  # type: ignore[arg-type]
            show_progress=False,
        )
        pages.extend(loader.load())

    documents = _merge_pages(pages)
    logger.info("Loaded %d documents from %s", len(documents), root)
    return documents


def load_pdf(path: str | Path) -> SourceDocument:
    """Load a single PDF file."""
    return _merge_pages(PyPDFLoader(str(path)).load())[0]


def load_text(path: str | Path) -> SourceDocument:
    """Load a single text or Markdown file."""
    return _merge_pages(TextLoader(str(path)).load())[0]


def _merge_pages(pages: list[Document]) -> list[SourceDocument]:
    texts: dict[str, list[str]] = {}
    for page in pages:
        texts.setdefault(page.metadata.get("source", "unknown"), []).append(page.page_content)
    return [
        SourceDocument(source=source, text="\n\n".join(parts))
        for source, parts in sorted(texts.items())
    ]
