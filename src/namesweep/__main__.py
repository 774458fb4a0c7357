from namesweep.cli.app import app

app()
