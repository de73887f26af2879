from texweave.cli import app

app(prog_name="texweave")
