"""
Tests for Learning Samples
==========================
Tests for sample types and sample file parsing in namegen/sample.py.
"""

import pytest
import sys
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from namegen.sample import (
    SampleSet,
    Tokens,
    WeightedWord,
    Word,
    load_sample_sets,
    parse_sample_sets,
    parse_word_line,
)


class TestSampleTypes:
    """Tests for sample construction."""

    def test_tokens_are_tuples(self):
        """Test that token lists are frozen into tuples."""
        sample = Tokens(['th', 'a'])
        assert sample.tokens == ('th', 'a')
        assert sample == Tokens(('th', 'a'))

    def test_add_word(self):
        """Test that weights above one produce WeightedWord."""
        sample_set = SampleSet()
        sample_set.add_word('stuff')
        sample_set.add_word('things', 3)
        assert sample_set.samples == [Word('stuff'), WeightedWord('things', 3)]
        assert len(sample_set) == 2

    def test_of_tokens(self):
        """Test the labeled set constructor."""
        sample_set = SampleSet.of_tokens(['a', 'b'], [['x', 'y']])
        assert sample_set.labels == ['a', 'b']
        assert sample_set.samples == [Tokens(['x', 'y'])]


class TestSampleParsing:
    """Tests for sample file parsing."""

    def test_word_line(self):
        """Test plain and weighted word lines."""
        assert parse_word_line('aeyna') == Word('aeyna')
        assert parse_word_line('the Bold*4') == WeightedWord('the Bold', 4)

    def test_bad_weight(self):
        """Test that an unparsable weight raises ValueError."""
        with pytest.raises(ValueError):
            parse_word_line('stuff*lots')

    def test_word_blocks(self):
        """Test that blank lines separate sets and comments are skipped."""
        text = "# first\naeyna\nilyna\n\n\n# second\nrenala\n"
        sets = parse_sample_sets(text)
        assert len(sets) == 2
        assert sets[0].samples == [Word('aeyna'), Word('ilyna')]
        assert sets[1].samples == [Word('renala')]

    def test_token_blocks(self):
        """Test that the first line of a grammar block holds the labels."""
        text = "onset vowel\nth a\nk ae\n\n* end\nm ra\n"
        sets = parse_sample_sets(text, kind='tokens')
        assert sets[0].labels == ['onset', 'vowel']
        assert sets[0].samples == [Tokens(['th', 'a']), Tokens(['k', 'ae'])]
        assert sets[1].labels == ['*', 'end']

    def test_unknown_kind(self):
        """Test that an unknown kind is refused."""
        with pytest.raises(ValueError):
            parse_sample_sets('abc', kind='phonemes')

    def test_load(self, tmp_path):
        """Test loading from a file."""
        path = tmp_path / "names.txt"
        path.write_text("aeyna\nvynira*2\n", encoding="utf-8")
        sets = load_sample_sets(path)
        assert sets[0].samples == [Word('aeyna'), WeightedWord('vynira', 2)]

    def test_load_missing(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_sample_sets(tmp_path / "missing.txt")
