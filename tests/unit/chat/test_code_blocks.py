"""Tests for fenced code block detection and extraction."""

from openaicli.chat.code_blocks import extract_blocks, extract_language_tag, has_code


def test_single_tagged_block():
    text = "```python\nprint(1)\n```"
    assert has_code(text)
    assert list(extract_blocks(text)) == ["print(1)"]
    assert extract_language_tag(text) == "python"


def test_block_inside_prose():
    text = "Here you go:\n```go\nfunc main() {}\n```\nEnjoy."
    assert list(extract_blocks(text)) == ["func main() {}"]
    assert extract_language_tag(text) == "go"


def test_untagged_block_has_empty_tag():
    text = "```\necho hi\n```"
    assert extract_language_tag(text) == ""
    assert list(extract_blocks(text)) == ["echo hi"]


def test_no_code():
    text = "just words, and a single ``` fence"
    assert not has_code(text)
    assert extract_language_tag(text) == ""
    assert list(extract_blocks(text)) == []


def test_multiple_blocks_span_first_opener_to_last_closer():
    text = "```a``` text ```b```"
    blocks = list(extract_blocks(text))
    assert blocks == ["``` text ```b"]
    assert extract_language_tag(text) == "a"


def test_multiline_blocks_collapse_into_one():
    text = "```sh\nls\n```\nthen\n```sh\npwd\n```"
    assert list(extract_blocks(text)) == ["ls\n```\nthen\n```sh\npwd"]


def test_escape_sequences_are_unescaped_and_trimmed():
    text = '```js\n  console.log(\\"hi\\");\\nreturn;  \n```'
    assert list(extract_blocks(text)) == ['console.log("hi");\nreturn;']


def test_extract_blocks_is_restartable():
    text = "```c\nint x;\n```"
    blocks = extract_blocks(text)
    assert list(blocks) == ["int x;"]
    assert list(blocks) == []
    assert list(extract_blocks(text)) == ["int x;"]
