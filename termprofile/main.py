"""Program entry point (CLI dispatcher)."""
from __future__ import annotations
from termprofile.cli.commands import cli

def main():  # pragma: no cover - thin wrapper
	cli()

if __name__ == '__main__':  # pragma: no cover
	main()
