from __future__ import annotations

from bs4 import BeautifulSoup

from measure_media.config import MeasureConfig
from measure_media.filters import check_filter


def _node(html):
    return BeautifulSoup(html, "html.parser").find()


def test_exclude_mode():
    config = MeasureConfig(filter="exclude")

    assert check_filter(_node('<img src="a.jpg">'), config) is True
    assert check_filter(_node('<img src="a.jpg" data-measure-media-exclude>'), config) is False
    assert check_filter(_node('<img data-measure-media-exclude>'), config, nested=True) is False


def test_include_mode_requires_attribute_at_top_level():
    config = MeasureConfig(filter="include")

    assert check_filter(_node('<img src="a.jpg">'), config) is False
    assert check_filter(_node('<img src="a.jpg" data-measure-media-include>'), config) is True


def test_include_mode_relaxed_for_nested_nodes():
    config = MeasureConfig(filter="include")

    assert check_filter(_node('<img src="a.jpg">'), config, nested=True) is True


def test_custom_attribute_names():
    config = MeasureConfig(exclude="data-skip")

    assert check_filter(_node('<img data-skip src="a.jpg">'), config) is False
    assert check_filter(_node('<img data-measure-media-exclude src="a.jpg">'), config) is True


def test_missing_node_treated_as_attributeless():
    assert check_filter(None, MeasureConfig(filter="exclude"), nested=True) is True
    assert check_filter(None, MeasureConfig(filter="include")) is False


def test_unknown_filter_mode_rejects():
    assert check_filter(_node('<img src="a.jpg">'), MeasureConfig(filter="other")) is False
