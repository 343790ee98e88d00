"""Renderers used by the document tests."""


def failing_renderer(document):
    raise RuntimeError(f"template missing for {document.doc_type}")
