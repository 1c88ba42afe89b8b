"""Tests for similarity scoring and match strategies."""

import pytest

from verifier import (
    ConfigError,
    Geometry,
    best_match,
    first_match,
    get_strategy,
    name_similarity,
    size_similarity,
)


class TestNameSimilarity:
    """Tests for label/token overlap."""

    def test_identical_names(self):
        assert name_similarity('hero', 'hero') == 1.0

    def test_submit_button_scenario(self):
        """'Submit Button' vs 'button.submit-btn' match on both tokens."""
        score = name_similarity('Submit Button', 'button.submit-btn')

        assert score >= 0.5
        assert score == 1.0

    def test_element_split_on_id_and_class(self):
        assert name_similarity('Nav', 'header#nav.sticky') == pytest.approx(1 / 3)

    def test_case_insensitive(self):
        assert name_similarity('PRIMARY', 'button.primary') == 0.5

    def test_divides_by_longer_side(self):
        # 'card' matches, 'title' and 'large' do not: 1 / max(3, 2)
        assert name_similarity('Card Title Large', 'div.card') == pytest.approx(1 / 3)

    @pytest.mark.parametrize('design, element', [
        ('', 'div.card'),
        ('   ', 'div.card'),
        ('Card', ''),
        ('Card', '#.'),
    ])
    def test_no_tokens_is_zero(self, design, element):
        assert name_similarity(design, element) == 0.0

    @pytest.mark.parametrize('design, element', [
        ('Submit Button', 'button.submit-btn'),
        ('a b c d e', 'div'),
        ('x', 'span.a.b.c.d.e.f'),
        ('Icon / Arrow', 'svg#arrow.icon'),
        ('Totally Different', 'section#main'),
    ])
    def test_bounds(self, design, element):
        assert 0.0 <= name_similarity(design, element) <= 1.0

    def test_each_design_token_counted_once(self):
        # 'btn' is a substring of both element tokens but counts once.
        assert name_similarity('btn', 'button#btn.btn-primary') == pytest.approx(1 / 3)


class TestSizeSimilarity:
    """Tests for geometric closeness."""

    def test_identical_geometry(self):
        geom = Geometry(0, 0, 120, 40)

        assert size_similarity(geom, geom) == 1.0

    def test_position_ignored(self):
        assert size_similarity(Geometry(0, 0, 50, 50), Geometry(300, 400, 50, 50)) == 1.0

    def test_axis_average(self):
        # width 1 - 20/100 = 0.8, height 1 - 0/50 = 1.0
        assert size_similarity(Geometry(0, 0, 100, 50), Geometry(0, 0, 80, 50)) == pytest.approx(0.9)

    def test_symmetric(self):
        a, b = Geometry(0, 0, 37, 91), Geometry(0, 0, 120, 12)

        assert size_similarity(a, b) == size_similarity(b, a)

    def test_both_zero_axis_is_non_matching(self):
        assert size_similarity(Geometry(0, 0, 0, 40), Geometry(0, 0, 0, 40)) == 0.0

    def test_one_zero_side(self):
        # width axis 0.0, height axis 1.0
        assert size_similarity(Geometry(0, 0, 0, 10), Geometry(0, 0, 5, 10)) == 0.5

    def test_missing_geometry(self):
        assert size_similarity(None, Geometry(0, 0, 5, 5)) == 0.0

    @pytest.mark.parametrize('a, b', [
        ((1, 1), (1000, 1000)),
        ((0, 0), (10, 10)),
        ((320, 200), (343, 180)),
        ((0.5, 3), (7, 0.25)),
    ])
    def test_bounds(self, a, b):
        score = size_similarity(Geometry(0, 0, *a), Geometry(0, 0, *b))

        assert 0.0 <= score <= 1.0


class TestFirstMatch:
    """Tests for the first-match policy."""

    def test_scenario_matches(self, submit_button, submit_element):
        assert first_match([submit_button], submit_element) is submit_button

    def test_no_candidates(self, submit_element):
        assert first_match([], submit_element) is None

    def test_nothing_clears_threshold(self, make_node, make_element):
        candidates = [make_node('Hero', 10, 10), make_node('Footer', 900, 300)]

        assert first_match(candidates, make_element('section#main', 400, 120)) is None

    def test_name_threshold_is_strict(self, make_node, make_element):
        """Name similarity of exactly 0.5 is not enough on its own."""
        node = make_node('Submit Form', 10, 10)

        assert first_match([node], make_element('button.submit', 100, 100)) is None

    def test_size_threshold_is_strict(self, make_node, make_element):
        # width 0.6, height 1.0 -> exactly 0.8
        node = make_node('Hero', 100, 50)

        assert first_match([node], make_element('section', 60, 50)) is None

    def test_size_alone_matches(self, make_node, make_element):
        node = make_node('Hero', 100, 50)

        assert first_match([node], make_element('section#main', 95, 50)) is node

    def test_first_qualifying_wins(self, make_node, make_element):
        a = make_node('Card', 100, 100, node_id='a')
        b = make_node('Submit Button', 100, 100, node_id='b')
        element = make_element('button.submit', 100, 100)

        assert first_match([a, b], element) is a
        assert first_match([b, a], element) is b

    def test_reordering_non_qualifying_has_no_effect(self, make_node, make_element):
        match = make_node('Card', 100, 100, node_id='a')
        other = make_node('Footer', 10, 900, node_id='b')
        element = make_element('div.card', 100, 100)

        assert first_match([match, other], element) is match
        assert first_match([other, match], element) is match

    def test_deterministic(self, make_node, make_element):
        candidates = [make_node(f'Node {i}', 10 * i + 10, 40, node_id=str(i)) for i in range(20)]
        element = make_element('div', 105, 40)

        assert first_match(candidates, element) is first_match(candidates, element)

    def test_design_scale(self, make_node, make_element):
        """Design units are scaled to CSS pixels before comparing sizes."""
        node = make_node('Hero', 60, 20)
        element = make_element('section#main', 120, 40)

        assert first_match([node], element) is None
        assert first_match([node], element, scale=2.0) is node

    def test_structural_candidate_never_matches_on_size(self, make_node, make_element):
        node = make_node('Group', None)

        assert first_match([node], make_element('div', 100, 40)) is None


class TestBestMatch:
    """Tests for the best-score alternative."""

    def test_prefers_higher_combined_score(self, make_node, make_element):
        a = make_node('Card', 100, 100, node_id='a')
        b = make_node('Submit Button', 100, 100, node_id='b')
        element = make_element('button.submit', 100, 100)

        assert best_match([a, b], element) is b

    def test_tie_goes_to_earliest(self, make_node, make_element):
        a = make_node('Box', 100, 100, node_id='a')
        b = make_node('Box', 100, 100, node_id='b')

        assert best_match([a, b], make_element('div', 100, 100)) is a

    def test_none_when_nothing_qualifies(self, make_node, make_element):
        assert best_match([make_node('Hero', 10, 10)], make_element('section', 400, 400)) is None


class TestGetStrategy:
    """Tests for strategy lookup."""

    def test_known(self):
        assert get_strategy('first') is first_match
        assert get_strategy('best') is best_match

    def test_unknown(self):
        with pytest.raises(ConfigError):
            get_strategy('hungarian')
