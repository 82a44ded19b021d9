import json

import click

from esg_engine import create_app
from esg_engine.calculations.run_module import UnknownModuleError, run_module

app = create_app()


@app.cli.command("calculate")
@click.argument("module_id")
@click.argument("input_file", type=click.File("r", encoding="utf-8"))
def calculate(module_id, input_file):
    """Run one module against a JSON input file and print the result."""
    try:
        result = run_module(module_id, json.load(input_file))
    except UnknownModuleError as e:
        raise click.BadParameter(str(e), param_hint="MODULE_ID")
    click.echo(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=5000)
