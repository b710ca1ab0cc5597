"""Tests for run segmentation and HTML rendering."""

from __future__ import annotations

from contractmark.richtext.ranges import COMMENT_ATTR, HIGHLIGHT_ATTR, AttributeRun
from contractmark.richtext.render import Segment, runs_to_markup, segment_runs


def _hl(start: int, text: str, comment: str) -> AttributeRun:
    return AttributeRun(
        start, start + len(text), text, {HIGHLIGHT_ATTR: True, COMMENT_ATTR: comment}
    )


class TestSegmentRuns:
    def test_empty_input_is_one_empty_paragraph(self) -> None:
        assert segment_runs([]) == [[]]

    def test_single_paragraph(self) -> None:
        runs = [AttributeRun(0, 3, "Bu "), _hl(3, "bir", "Not")]
        assert segment_runs(runs) == [
            [Segment(0, "Bu "), Segment(3, "bir", "Not")]
        ]

    def test_newlines_split_paragraphs_and_keep_offsets(self) -> None:
        runs = [AttributeRun(0, 7, "Bir\nİki"), _hl(7, "\nÜç", "Not")]
        paragraphs = segment_runs(runs)
        assert paragraphs == [
            [Segment(0, "Bir")],
            [Segment(4, "İki")],
            [Segment(8, "Üç", "Not")],
        ]

    def test_highlight_segment_flag(self) -> None:
        [[plain, marked]] = segment_runs(
            [AttributeRun(0, 2, "ab"), _hl(2, "cd", "x")]
        )
        assert not plain.is_highlight
        assert marked.is_highlight


class TestRunsToMarkup:
    def test_text_is_escaped(self) -> None:
        markup = runs_to_markup([AttributeRun(0, 5, "a < b")])
        assert markup == "<p>a &lt; b</p>"

    def test_highlight_span_carries_comment(self) -> None:
        markup = runs_to_markup([_hl(0, "metin", 'a "b"')])
        assert markup == (
            '<p><span class="highlight" data-comment="a &quot;b&quot;">'
            "metin</span></p>"
        )
