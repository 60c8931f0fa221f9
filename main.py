"""
Go Function CFG Visualizer
Main CLI entry point for the analysis pipeline.
Renders a function's control flow graph as Graphviz DOT and scores it with
Chepin's information-flow metric and cyclomatic complexity.
"""

import click
import json
import os
import sys
import re
from pathlib import Path
from typing import Optional

from ast_parser import ASTParser
from cfg_extractor import CFGExtractor
from cfg_printer import format_cfg
from complexity_metrics import ComplexityMetrics
from dot_generator import DotGenerator, DotStyle
from dot_renderer import RemoteRenderer, SUPPORTED_FORMATS
from validator import Validator, CFGValidationError, DotSyntaxError


class AnalysisPipeline:
    """Compiler-style pipeline for Go function CFG visualization."""

    def __init__(self, style: Optional[DotStyle] = None,
                 render_url: Optional[str] = None, render_format: str = "svg"):
        """
        Initialize analysis pipeline.

        Args:
            style: DOT colors and fonts (default: DotStyle())
            render_url: Kroki-compatible renderer URL (None disables rendering)
            render_format: Rendered image format, "svg" or "png" (default: svg)
        """
        self.ast_parser = ASTParser()
        self.cfg_extractor = CFGExtractor()
        self.validator = Validator()
        self.dot_generator = DotGenerator(style)
        self.complexity_calculator = ComplexityMetrics()
        self.renderer = None
        if render_url:
            self.renderer = RemoteRenderer(render_url, render_format)

    def list_functions(self, file_path: str) -> list:
        ast_data = self.ast_parser.parse_file(file_path)
        return self.ast_parser.list_functions(ast_data)

    def analyze(self, file_path: str, function_name: Optional[str] = None,
                output_dir: str = "output", print_cfg: bool = False) -> dict:
        """
        Analyze one Go function.

        Args:
            file_path: Path to Go source file
            function_name: Function name to analyze (None for first function)
            output_dir: Output directory for results
            print_cfg: Echo the textual CFG dump

        Returns:
            Dictionary with dot, metrics, diagnostics and output_files
        """
        # Step 1: Parse Go file
        click.echo(f"Parsing Go file: {file_path}")
        ast_data = self.ast_parser.parse_file(file_path)

        # Step 2: Find function
        function_node = self.ast_parser.find_function(ast_data, function_name)
        if not function_node:
            # List available functions for better error message
            available_functions = self.ast_parser.list_functions(ast_data)
            error_msg = f"Function '{function_name}' not found in {file_path}"
            if available_functions:
                error_msg += "\n\nAvailable functions in this file:\n"
                for func in available_functions[:20]:
                    error_msg += f"  - {func}\n"
                if len(available_functions) > 20:
                    error_msg += f"  ... and {len(available_functions) - 20} more\n"
            raise ValueError(error_msg)

        func_name = function_node["name"]
        click.echo(f"Found function: {func_name}")

        # Step 3: Convert function body
        function_body = self.ast_parser.get_function_body(function_node, ast_data["source"])
        if function_body is None:
            raise ValueError(f"Function body not found for {func_name}")

        # Step 4: Extract CFG
        click.echo("Extracting Control Flow Graph...")
        cfg = self.cfg_extractor.extract(function_body)

        is_valid, errors = self.validator.validate_cfg(cfg)
        if not is_valid:
            click.echo(f"CFG validation failed: {errors}", err=True)
            raise CFGValidationError(f"CFG validation failed: {errors}")

        if print_cfg:
            click.echo(format_cfg(cfg), nl=False)
            click.echo("-" * 18)

        # Step 5: Render DOT
        click.echo("Generating DOT document...")
        result = self.dot_generator.render(cfg)
        for diagnostic in result.state.diagnostics:
            click.echo(f"  warning: {diagnostic}", err=True)

        is_valid, errors = self.validator.validate_dot(result.document)
        if not is_valid:
            click.echo(f"DOT validation failed: {errors}", err=True)
            raise DotSyntaxError(f"DOT validation failed: {errors}")
        click.echo("✓ DOT validation passed")

        # Step 6: Calculate complexity metrics
        click.echo("Calculating complexity metrics...")
        metrics = self.complexity_calculator.calculate(result.state)
        metrics["function"] = func_name

        # Step 7: Write output
        os.makedirs(output_dir, exist_ok=True)
        file_stem = func_name.replace(".", "_")
        output_files = {}

        dot_file = Path(output_dir) / f"{file_stem}.dot"
        with open(dot_file, 'w', encoding='utf-8') as f:
            f.write(result.document)
        click.echo(f"DOT written to: {dot_file}")
        output_files["dot"] = str(dot_file)

        metrics_file = Path(output_dir) / f"{file_stem}_metrics.json"
        with open(metrics_file, 'w', encoding='utf-8') as f:
            json.dump(metrics, f, indent=2)
        click.echo(f"Metrics written to: {metrics_file}")
        output_files["metrics"] = str(metrics_file)

        if self.renderer is not None:
            click.echo(f"Rendering {self.renderer.output_format} via {self.renderer.base_url}...")
            image = self.renderer.render(result.document)
            image_file = Path(output_dir) / f"{file_stem}.{self.renderer.output_format}"
            with open(image_file, 'wb') as f:
                f.write(image)
            click.echo(f"Image written to: {image_file}")
            output_files["image"] = str(image_file)

        return {
            "dot": result.document,
            "metrics": metrics,
            "diagnostics": list(result.state.diagnostics),
            "output_files": output_files,
        }


@click.command()
@click.argument('file_path', type=str)
@click.option('--function', '-f', help='Function name to analyze (default: first function)')
@click.option('--output-dir', '-o', default='output', help='Output directory (default: output)')
@click.option('--print-cfg', is_flag=True, help='Print the basic blocks before rendering')
@click.option('--list', 'list_only', is_flag=True, help='List the functions in the file and exit')
@click.option('--affirmative-color', default='yellow',
              help='Color of then/loop-body edges (default: yellow)')
@click.option('--negative-color', default='red',
              help='Color of else/loop-exit edges (default: red)')
@click.option('--render-url', default=None,
              help='Kroki-compatible renderer URL, e.g. https://kroki.io (default: no rendering)')
@click.option('--format', 'render_format', type=click.Choice(SUPPORTED_FORMATS, case_sensitive=False),
              default='svg', help='Rendered image format (default: svg)')
def main(file_path, function, output_dir, print_cfg, list_only, affirmative_color,
         negative_color, render_url, render_format):
    """
    Go Function CFG Visualizer

    Renders the control flow graph of a Go function as a Graphviz DOT
    document and computes its Chepin and cyclomatic complexity.

    Examples:
        # First function of the file
        cfgviz example.go

        # A method, with the CFG printed
        cfgviz example.go --function Server.Handle --print-cfg

        # Also render an SVG through Kroki
        cfgviz example.go -f fib --render-url https://kroki.io --format svg
    """
    try:
        # Remove quotes if present (user might have quoted the path)
        file_path = os.path.normpath(file_path.strip('"\''))
        if not Path(file_path).is_file():
            click.echo(f"Error: File not found: {file_path}", err=True)
            click.echo(f"  Current directory: {os.getcwd()}", err=True)
            sys.exit(1)

        # Remove parentheses from function name if present (e.g., fib() -> fib)
        if function:
            function = re.sub(r'\([^)]*\)\s*$', '', function.strip())

        style = DotStyle(affirmative_color=affirmative_color, negative_color=negative_color)
        pipeline = AnalysisPipeline(
            style=style,
            render_url=render_url,
            render_format=render_format.lower()
        )

        if list_only:
            for name in pipeline.list_functions(file_path):
                click.echo(name)
            return

        result = pipeline.analyze(
            file_path=file_path,
            function_name=function,
            output_dir=output_dir,
            print_cfg=print_cfg
        )

        metrics = result['metrics']
        click.echo("\n✓ Analysis successful!")
        click.echo(f"  Chepin Complexity: {metrics['chepin']}")
        click.echo(f"  Cyclomatic Complexity: {metrics['cyclomatic_complexity']} "
                   f"({metrics['classification']})")
        click.echo(f"  Nodes: {metrics['node_count']}")
        click.echo(f"  Edges: {metrics['edge_count']}")

    except Exception as e:
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
