# hdlscript/__main__.py
from hdlscript.cli import cli

cli(prog_name="hdlscript")
