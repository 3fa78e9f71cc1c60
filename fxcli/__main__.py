from fxcli.main import cli

cli()
