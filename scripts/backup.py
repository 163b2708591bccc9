"""Copy the profile files (bookmarks, key, config, ssh keys) to a backup dir.

Usage (from repo root):
  python -m scripts.backup --dest backups/

The key file is copied together with the bookmarks; without it the stored
passwords cannot be decrypted.
"""
from __future__ import annotations
import shutil
from datetime import datetime
from pathlib import Path
import click
from config import settings

@click.command()
@click.option('--dest', type=click.Path(file_okay=False, path_type=Path), default=Path('backups'), help='Destination directory for backups.')
def main(dest: Path):
	paths = settings.resolve_paths()
	present = {name: p for name, p in paths.items() if p.exists()}
	if not present:
		click.echo(f"No profile at {settings.profile_dir()}; nothing to backup.")
		raise SystemExit(1)
	stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
	target = dest / f"profile_{stamp}"
	target.mkdir(parents=True, exist_ok=True)
	for p in present.values():
		if p.is_dir():
			shutil.copytree(p, target / p.name)
		else:
			shutil.copy2(p, target / p.name)
	click.echo(f"Backup written: {target}")

if __name__ == '__main__':  # pragma: no cover
	main()
