from pinguard.cli import cli

cli()
