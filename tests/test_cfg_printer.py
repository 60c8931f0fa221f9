"""
Tests for the textual CFG dump.
"""

from cfg_printer import format_cfg


class TestFormatCFG:
    """Tests for format_cfg."""

    def test_branch_scenario(self, extract, branch_body):
        """Test blocks, node labels and successors."""
        assert format_cfg(extract(branch_body)) == (
            "Block: block 0 (Body)\n"
            " -> Node: a = 0\n"
            " -> Node: b = 1\n"
            " -> Node: if n < 2\n"
            " -> Successor: block 1 (IfThen) [then]\n"
            " -> Successor: block 2 (IfDone) [else]\n"
            "Block: block 1 (IfThen)\n"
            " -> Node: return n\n"
            " -> Successor: block 4 (Exit)\n"
            "Block: block 2 (IfDone)\n"
            " -> Successor: block 4 (Exit)\n"
            "Block: block 3 (Unreachable) [dead]\n"
            " -> Successor: block 2 (IfDone)\n"
            "Block: block 4 (Exit)\n"
        )

    def test_live_only(self, extract, branch_body):
        """Test that dead blocks can be left out."""
        text = format_cfg(extract(branch_body), include_dead=False)
        assert "Unreachable" not in text
        assert text.count("Block:") == 4
