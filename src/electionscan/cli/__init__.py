import click

from electionscan.version import __version__


@click.group()
@click.version_option(version=__version__)
def cli() -> None: ...


from . import config, database, scan  # noqa: F401, E402
