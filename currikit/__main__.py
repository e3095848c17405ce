"""Allow ``python -m currikit``."""

from currikit.cli.main import app

app(prog_name="currikit")
