from cherrymcp.cli.main import app

app()
