from csvimport_app.cli import app

app()
