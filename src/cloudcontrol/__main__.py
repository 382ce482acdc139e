"""Allow `python -m cloudcontrol`."""

from cloudcontrol.cli.main import cli

if __name__ == "__main__":
    cli()
