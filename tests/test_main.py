"""
Tests for the cfgviz command line interface.
"""

import json

import pytest
import requests
from click.testing import CliRunner

from main import main

SOURCE = '''package demo

func fib(n int) int {
	a := 0
	b := 1
	if n < 2 {
		return n
	}
	return a + b
}

func (s *Server) Reset() {
	s.hits = 0
}
'''


@pytest.fixture
def go_file(tmp_path):
    path = tmp_path / "demo.go"
    path.write_text(SOURCE, encoding="utf-8")
    return path


class TestCLI:
    """Tests for the main command."""

    def test_writes_outputs(self, go_file, tmp_path):
        """Test that the DOT document and metrics are written."""
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(main, [str(go_file), "-f", "fib", "-o", str(out_dir)])
        assert result.exit_code == 0, result.output
        assert "Analysis successful" in result.output

        document = (out_dir / "fib.dot").read_text(encoding="utf-8")
        assert document.startswith("digraph G {\n")
        assert 'label="if n < 2"' in document

        metrics = json.loads((out_dir / "fib_metrics.json").read_text(encoding="utf-8"))
        assert metrics["function"] == "fib"
        assert metrics["cyclomatic_complexity"] == 2
        assert metrics["roles"]["C"] == ["n"]

    def test_function_with_parentheses(self, go_file, tmp_path):
        """Test that a trailing parameter list is ignored."""
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(main, [str(go_file), "-f", "fib()", "-o", str(out_dir)])
        assert result.exit_code == 0, result.output
        assert (out_dir / "fib.dot").exists()

    def test_method_output_name(self, go_file, tmp_path):
        """Test that method outputs use an underscore between receiver and name."""
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(main, [str(go_file), "-f", "Server.Reset", "-o", str(out_dir)])
        assert result.exit_code == 0, result.output
        assert (out_dir / "Server_Reset.dot").exists()

    def test_print_cfg(self, go_file, tmp_path):
        """Test the block dump option."""
        result = CliRunner().invoke(main, [str(go_file), "--print-cfg", "-o", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "Block: block 0 (Body)" in result.output
        assert " -> Node: if n < 2" in result.output

    def test_list(self, go_file):
        """Test listing functions."""
        result = CliRunner().invoke(main, [str(go_file), "--list"])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["fib", "Server.Reset"]

    def test_missing_function(self, go_file, tmp_path):
        """Test the error for an unknown function."""
        result = CliRunner().invoke(main, [str(go_file), "-f", "nope", "-o", str(tmp_path)])
        assert result.exit_code == 1
        assert "Function 'nope' not found" in result.output
        assert "  - fib" in result.output

    def test_missing_file(self, tmp_path):
        """Test the error for a missing source file."""
        result = CliRunner().invoke(main, [str(tmp_path / "absent.go")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_render(self, go_file, tmp_path, monkeypatch):
        """Test rendering through the remote service."""
        class Response:
            status_code = 200
            content = b"<svg/>"
            text = ""

            def raise_for_status(self):
                pass

        monkeypatch.setattr(requests, "post", lambda *args, **kwargs: Response())
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(main, [
            str(go_file), "-f", "fib", "-o", str(out_dir),
            "--render-url", "http://kroki.local", "--format", "svg",
        ])
        assert result.exit_code == 0, result.output
        assert (out_dir / "fib.svg").read_bytes() == b"<svg/>"

    def test_custom_colors(self, go_file, tmp_path):
        """Test color options reach the document."""
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(main, [
            str(go_file), "-f", "fib", "-o", str(out_dir),
            "--affirmative-color", "green", "--negative-color", "blue",
        ])
        assert result.exit_code == 0, result.output
        document = (out_dir / "fib.dot").read_text(encoding="utf-8")
        assert 'color="green"' in document
        assert 'color="blue"' in document
