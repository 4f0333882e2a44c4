from mimeregistry.cli import app

app(prog_name="mimeregistry")
