from .cli import app

app(prog_name="doc-archive")
