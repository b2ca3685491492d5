import pytest

from openaicli.config.properties import load_properties, parse_properties_text
from openaicli.errors import ConfigurationError


def test_parse_properties_text_handles_separators_and_comments():
    parsed = parse_properties_text(
        """
        # comment
        ! also a comment
        openai.model = gpt-4o-mini
        openaicli.commandline.header: >>>
        openaicli.filename.dateFormat=yyyy-MM-dd HH:mm
        not a property line
        """
    )
    assert parsed == {
        "openai.model": "gpt-4o-mini",
        "openaicli.commandline.header": ">>>",
        "openaicli.filename.dateFormat": "yyyy-MM-dd HH:mm",
    }


def test_later_duplicates_win():
    assert parse_properties_text("a=1\na=2\n") == {"a": "2"}


def test_missing_optional_file_is_empty(tmp_path):
    assert load_properties(tmp_path / "config.properties") == {}


def test_missing_required_file_is_an_error(tmp_path):
    with pytest.raises(ConfigurationError):
        load_properties(tmp_path / "config.properties", required=True)
