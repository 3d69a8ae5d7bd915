from search_bot.search.formatting import format_document
from search_bot.search.models import SearchDocument


def test_document_with_uri_renders_link():
    doc = SearchDocument(
        id="1",
        title="handbook.txt",
        source_uri="https://example.com/handbook.txt",
        content="Vacation policy: 25 days.",
    )

    text = format_document(doc)

    assert text == (
        "**Title**: handbook.txt\n\n"
        "**Content**: Vacation policy: 25 days.\n\n"
        "[Read more here](https://example.com/handbook.txt)\n\n"
    )


def test_document_without_uri_renders_no_reference_marker():
    doc = SearchDocument(id="2", title="notes.txt", content="Plain notes")

    text = format_document(doc)

    assert "**Title**: notes.txt" in text
    assert "**Content**: Plain notes" in text
    assert "(No document reference available)" in text
    assert "Read more here" not in text


def test_missing_title_and_content_use_placeholders():
    text = format_document(SearchDocument(id="3"))

    assert "**Title**: Untitled Document" in text
    assert "**Content**: No content available" in text
