from typing import Annotated, NoReturn

import typer
from rich import print
from rich.markup import escape
from rich.tree import Tree
from typer import Typer

from .bindings.structured import (
    IndexBinding,
    OneOrMoreBinding,
    OptionalBinding,
    StructuredBinding,
    ValueBinding,
    ZeroOrMoreBinding,
)
from .errors import PatternError
from .lexer import lex
from .pattern import parse_pattern
from .tokens import unparse

app = Typer(no_args_is_help=True)


def _fail(error: PatternError) -> NoReturn:
    print(f"[red]{escape(str(error))}[/red]")
    for note in getattr(error, "__notes__", []):
        print(escape(note))
    raise typer.Exit(code=1)


def _add_binding(tree: Tree, label: str, binding: StructuredBinding) -> None:
    match binding:
        case ValueBinding():
            tree.add(f"{label} = [green]{escape(str(binding))}[/green]")
        case IndexBinding(count=count):
            tree.add(f"{label} = [cyan]{count}[/cyan] (index)")
        case OptionalBinding(binding=None):
            tree.add(f"{label} = [dim]None[/dim]")
        case OptionalBinding(binding=inner):
            _add_binding(tree.add(f"{label} [dim](optional)[/dim]"), "Some", inner)
        case ZeroOrMoreBinding(bindings=bindings) | OneOrMoreBinding(
            bindings=bindings
        ):
            branch = tree.add(f"{label} [dim]({binding.kind}, {len(bindings)})[/dim]")
            for i, b in enumerate(bindings):
                _add_binding(branch, escape(f"[{i}]"), b)


@app.command("match")
def match_command(
    pattern: Annotated[str, typer.Argument(help="Pattern source, e.g. '$($x:ident),*'")],
    source: Annotated[str, typer.Argument(help="Input to match against the pattern")],
    trace: Annotated[bool, typer.Option(help="Show the matcher trace on failure")] = False,
):
    """Match SOURCE against PATTERN and print the bindings."""
    try:
        bindings = parse_pattern(pattern).match(source, trace=trace)
    except PatternError as e:
        _fail(e)

    tree = Tree(f"[bold]{escape(pattern)}[/bold]")
    for name, binding in bindings.items():
        _add_binding(tree, f"[bold]{name}[/bold]", binding)
    print(tree)


@app.command("rewrite")
def rewrite_command(
    pattern: Annotated[str, typer.Argument(help="Pattern to match SOURCE with")],
    source: Annotated[str, typer.Argument(help="Input to rewrite")],
    template: Annotated[str, typer.Argument(help="Pattern to substitute into")],
):
    """Match SOURCE against PATTERN and substitute the bindings into TEMPLATE."""
    try:
        matcher = parse_pattern(pattern)
        transcriber = parse_pattern(template)
        matcher.assert_parameters_superset(transcriber)
        tokens = transcriber.substitute(matcher.match(lex(source)))
    except PatternError as e:
        _fail(e)
    print(escape(unparse(tokens)))


@app.command("check")
def check_command(pattern: Annotated[str, typer.Argument(help="Pattern source")]):
    """Validate PATTERN and print its parameter schema."""
    try:
        parsed = parse_pattern(pattern)
    except PatternError as e:
        _fail(e)
    print(f"[bold]{escape(str(parsed))}[/bold]")
    print(parsed.schema)


@app.command("dummy")
def dummy_command(pattern: Annotated[str, typer.Argument(help="Pattern source")]):
    """Print PATTERN with placeholder tokens for every parameter."""
    try:
        tokens = parse_pattern(pattern).dummy_tokens()
    except PatternError as e:
        _fail(e)
    print(escape(unparse(tokens)))


if __name__ == "__main__":
    app()
