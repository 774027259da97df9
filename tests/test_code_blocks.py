"""Unit tests for anonymous code blocks (project_synth.parsing.code_blocks)."""

from project_synth.models import ContentKind
from project_synth.parsing import extract_code_blocks, is_renderable, virtual_files_from_blocks


def test_extract_code_blocks():
    text = "Intro\n```HTML\n<p>a</p>\n```\nthen\n```\nplain\n```\n```css\n\n```"
    blocks = extract_code_blocks(text)
    assert [(b.language, b.code) for b in blocks] == [("html", "<p>a</p>"), ("text", "plain")]


def test_is_renderable():
    assert is_renderable(extract_code_blocks("```jsx\n<App />\n```"))
    assert not is_renderable(extract_code_blocks("```python\nprint(1)\n```"))
    assert not is_renderable([])


def test_single_block_becomes_index():
    files = virtual_files_from_blocks(extract_code_blocks("```html\n<p>a</p>\n```"))
    assert list(files) == ["index.html"]
    assert files["index.html"].kind == ContentKind.MARKUP


def test_several_blocks_numbered_in_order():
    text = "```html\n<p>a</p>\n```\n```python\nx = 1\n```\n```css\np{}\n```\n```tsx\nconst A = () => null;\n```"
    files = virtual_files_from_blocks(extract_code_blocks(text))
    assert list(files) == ["file1.html", "file2.css", "file3.jsx"]
    assert files["file3.jsx"].kind == ContentKind.COMPONENT_SYNTAX
