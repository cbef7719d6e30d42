from hostprov.main import cli

cli()
