"""Second-pass style tag rewriting."""

from __future__ import annotations

import pytest

from src.standout.errors import TagError
from src.standout.style.registry import Styles
from src.standout.tags import StyleTagParser, TagTransform, apply_tags, strip_tags


def test_apply_wraps_known_tags(sample_styles: Styles) -> None:
    assert apply_tags("[ok]done[/ok]", sample_styles) == "\x1b[32mdone\x1b[0m"


def test_nested_tags_restore_outer_style(sample_styles: Styles) -> None:
    result = apply_tags("[ok]a[warn]b[/warn]c[/ok]", sample_styles)

    assert result == "\x1b[32ma\x1b[1;33mb\x1b[0m\x1b[32mc\x1b[0m"


def test_remove_strips_known_tags_and_is_idempotent(sample_styles: Styles) -> None:
    text = "[ok]done[/ok] and [warn]careful[/warn]"

    once = strip_tags(text, sample_styles)

    assert once == "done and careful"
    assert strip_tags(once, sample_styles) == once


def test_keep_leaves_tags_verbatim(sample_styles: Styles) -> None:
    parser = StyleTagParser(sample_styles, TagTransform.KEEP)

    assert parser.process("[ok]done[/ok]") == "[ok]done[/ok]"


@pytest.mark.parametrize(
    "text",
    ["[ok]unclosed", "stray[/ok]", "index [1] here", "[a b]", "plain text"],
)
def test_malformed_tags_are_literal(sample_styles: Styles, text: str) -> None:
    assert apply_tags(text, sample_styles) == text


def test_unknown_tags_pass_through(sample_styles: Styles) -> None:
    assert apply_tags("[mystery]x[/mystery]", sample_styles) == "[mystery]x[/mystery]"
    assert strip_tags("[mystery]x[/mystery]", sample_styles) == "[mystery]x[/mystery]"


def test_strict_mode_rejects_unknown_tags(sample_styles: Styles) -> None:
    with pytest.raises(TagError) as excinfo:
        apply_tags("[mystery]x[/mystery]", sample_styles, strict=True)

    assert excinfo.value.tag == "mystery"


def test_existing_escapes_are_copied_through(sample_styles: Styles) -> None:
    text = "\x1b[4munder\x1b[0m [ok]x[/ok]"

    assert apply_tags(text, sample_styles) == "\x1b[4munder\x1b[0m \x1b[32mx\x1b[0m"


def test_without_styles_every_tag_is_removed() -> None:
    assert StyleTagParser(None, TagTransform.REMOVE).process("[anything]x[/anything]") == "x"
