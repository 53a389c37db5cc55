"""
Tests for CLI Commands
======================
Tests for the namegen CLI interface in namegen/cli.py.
"""

import json
import pytest
import sys
import subprocess
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from namegen.cli import build_parser, main, split_list


NAMES = """\
# elvish names
aeyna
ilyna
renala
vynira
sylvara
"""

ROWS = """\
onset vowel end
th a ra
k ae lis
s e vara
m i rae
"""

TITLES = """\
the Bold*5
the Wise
the Quiet*2
"""


@pytest.fixture
def names_file(tmp_path):
    path = tmp_path / "names.txt"
    path.write_text(NAMES, encoding="utf-8")
    return path


@pytest.fixture
def rows_file(tmp_path):
    path = tmp_path / "rows.txt"
    path.write_text(ROWS, encoding="utf-8")
    return path


@pytest.fixture
def titles_file(tmp_path):
    path = tmp_path / "titles.txt"
    path.write_text(TITLES, encoding="utf-8")
    return path


def run_json(capsys, argv):
    assert main(argv + ["--json"]) == 0
    return json.loads(capsys.readouterr().out)


class TestCLIBasic:
    """Basic CLI tests."""

    def test_version_flag(self):
        """Test --version flag."""
        result = subprocess.run(
            [sys.executable, "-m", "namegen", "--version"],
            capture_output=True,
            text=True,
            cwd=str(ROOT),
        )
        assert result.returncode == 0
        assert "namegen" in result.stdout.lower()

    def test_help_flag(self):
        """Test --help lists the engines."""
        result = subprocess.run(
            [sys.executable, "-m", "namegen", "--help"],
            capture_output=True,
            text=True,
            cwd=str(ROOT),
        )
        assert result.returncode == 0
        assert "markov" in result.stdout
        assert "grammar" in result.stdout
        assert "wordlist" in result.stdout

    def test_no_engine_prints_help(self, capsys):
        """Test that running without an engine shows help."""
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_split_list(self):
        """Test comma-separated option parsing."""
        assert split_list("th, ae,,sh") == ["th", "ae", "sh"]
        assert split_list("") == []

    def test_parser_defaults(self):
        """Test that defaults come from app.yaml."""
        args = build_parser().parse_args(["markov", "names.txt"])
        assert args.count == 20
        assert args.columns == 4
        assert args.tokens == []
        assert args.lrs is False


class TestCLIGenerate:
    """Tests for generating from each engine."""

    def test_markov_json(self, capsys, names_file):
        """Test Markov output as JSON."""
        names = run_json(capsys, ["markov", str(names_file), "-n", "8", "--seed", "3"])
        assert len(names) == 8
        assert all(isinstance(n, str) and n for n in names)

    def test_markov_seed_is_reproducible(self, capsys, names_file):
        """Test that the same seed prints the same names."""
        argv = ["markov", str(names_file), "-n", "10", "--seed", "99", "--tokens", "ae,yn", "--lrs"]
        assert run_json(capsys, argv) == run_json(capsys, argv)

    def test_grammar_json(self, capsys, rows_file):
        """Test grammar output as JSON."""
        names = run_json(capsys, ["grammar", str(rows_file), "-n", "12", "--seed", "5",
                                  "--subtokens", "th,ae", "--rlf"])
        assert len(names) == 12
        assert all(n for n in names)

    def test_wordlist_json(self, capsys, titles_file):
        """Test word list output as JSON."""
        names = run_json(capsys, ["wordlist", str(titles_file), "-n", "30", "--seed", "1"])
        assert set(names) <= {"the Bold", "the Wise", "the Quiet"}

    def test_table_output(self, capsys, titles_file):
        """Test the default grid output."""
        assert main(["wordlist", str(titles_file), "-n", "4", "--columns", "2", "--seed", "2"]) == 0
        assert "the" in capsys.readouterr().out

    def test_validate_flag(self, capsys, names_file):
        """Test that --validate reports a valid model."""
        assert main(["markov", str(names_file), "-n", "1", "--validate"]) == 0
        assert "model is valid" in capsys.readouterr().out

    def test_tree_flag(self, capsys, names_file):
        """Test that --tree prints the learned graph."""
        assert main(["markov", str(names_file), "-n", "0", "--tree"]) == 0
        assert capsys.readouterr().out.strip()

    def test_zero_count(self, capsys, names_file):
        """Test that a zero count prints an empty list."""
        assert run_json(capsys, ["markov", str(names_file), "-n", "0"]) == []


class TestCLIErrors:
    """Tests for error exits."""

    def test_missing_file(self, tmp_path, capsys):
        """Test that a missing sample file fails cleanly."""
        assert main(["markov", str(tmp_path / "nope.txt")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_short_word(self, tmp_path, capsys):
        """Test that a word below three tokens is reported."""
        path = tmp_path / "short.txt"
        path.write_text("ab\n", encoding="utf-8")
        assert main(["markov", str(path)]) == 1
        assert "INSUFFICIENT_TOKENS" in capsys.readouterr().err

    def test_label_mismatch(self, tmp_path, capsys):
        """Test that a grammar row with too many columns is reported."""
        path = tmp_path / "rows.txt"
        path.write_text("onset end\nth a ra\n", encoding="utf-8")
        assert main(["grammar", str(path)]) == 1
        assert "LABEL_LENGTH_MISMATCH" in capsys.readouterr().err

    def test_bad_weight(self, tmp_path, capsys):
        """Test that an unparsable weight is reported."""
        path = tmp_path / "titles.txt"
        path.write_text("the Bold*many\n", encoding="utf-8")
        assert main(["wordlist", str(path)]) == 1
        assert "Invalid weight" in capsys.readouterr().err

    def test_negative_count(self, names_file):
        """Test that a negative count is refused."""
        assert main(["markov", str(names_file), "-n", "-1"]) == 1

    def test_zero_columns(self, names_file):
        """Test that fewer than one column is refused."""
        assert main(["markov", str(names_file), "--columns", "0"]) == 1
