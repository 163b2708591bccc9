"""CLI commands implemented with click.

Groups:
- bookmark: saved hosts, passwords encrypted with the profile key
- recent:   bounded connection history
- config:   explorer/editor settings
- ssh-key:  per-host private key vault
"""
from __future__ import annotations
import logging, click
from pathlib import Path
from config.settings import DEFAULT_RECENTS_SIZE, resolve_paths
from termprofile.lib.profile_store import ProfileStore
from termprofile.lib.settings_store import SettingsStore
from termprofile.lib.protocol import FileTransferProtocol, GroupDirs
from termprofile.lib.serializer import SerializerError

PROTOCOLS = [p.value for p in FileTransferProtocol]

def _profile_store(recents_size: int = DEFAULT_RECENTS_SIZE) -> ProfileStore:
	paths = resolve_paths()
	paths['bookmarks'].parent.mkdir(parents=True, exist_ok=True)
	return ProfileStore(paths['bookmarks'], paths['key'], recents_size)

def _settings_store() -> SettingsStore:
	paths = resolve_paths()
	paths['config'].parent.mkdir(parents=True, exist_ok=True)
	return SettingsStore(paths['config'], paths['ssh_keys'])

@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log store activity to stderr.')
def cli(verbose):
	"""termprofile: bookmarks, recents and settings for a file-transfer client"""
	logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format='%(levelname)s %(name)s: %(message)s')

# --- Bookmarks ---

@cli.group()
def bookmark():
	"""Manage saved hosts."""

@bookmark.command('list')
def bookmark_list():
	try:
		ps = _profile_store()
		for name in sorted(ps.list_bookmark_names()):
			address, port, proto, username, _pw = ps.get_bookmark(name)
			click.echo(f"{name}: {username}@{address}:{port} [{proto}]")
	except SerializerError as e:
		click.echo(f'Error: {e}')

@bookmark.command('add')
@click.argument('name')
@click.option('--address', prompt=True)
@click.option('--port', type=click.IntRange(0, 65535), default=22, show_default=True)
@click.option('--protocol', type=click.Choice(PROTOCOLS, case_sensitive=False), default='SFTP', show_default=True)
@click.option('--username', prompt=True)
@click.option('--password', default=None, help='Stored encrypted; omit to save without password.')
def bookmark_add(name, address, port, protocol, username, password):
	"""Add (or replace) bookmark NAME."""
	if not name:
		click.echo('Error: bookmark name cannot be empty')
		return
	try:
		ps = _profile_store()
		ps.add_bookmark(name, address, port, FileTransferProtocol.from_str(protocol), username, password)
		ps.persist()
		click.echo(f'Bookmark {name} saved.')
	except SerializerError as e:
		click.echo(f'Error: {e}')

@bookmark.command('show')
@click.argument('name')
@click.option('--reveal', is_flag=True, help='Print the decrypted password.')
def bookmark_show(name, reveal):
	try:
		found = _profile_store().get_bookmark(name)
	except SerializerError as e:
		click.echo(f'Error: {e}')
		return
	if found is None:
		click.echo('Not found')
		return
	address, port, proto, username, password = found
	if password is None:
		pw = '-'
	else:
		pw = password if reveal else '********'
	click.echo(f"Name: {name}\nAddress: {address}\nPort: {port}\nProtocol: {proto}\nUsername: {username}\nPassword: {pw}")

@bookmark.command('delete')
@click.argument('name')
def bookmark_delete(name):
	try:
		ps = _profile_store()
		ps.delete_bookmark(name)
		ps.persist()
		click.echo(f'Bookmark {name} deleted.')
	except SerializerError as e:
		click.echo(f'Error: {e}')

# --- Recents ---

@cli.group()
@click.option('--recents-size', type=int, default=DEFAULT_RECENTS_SIZE, show_default=True)
@click.pass_context
def recent(ctx, recents_size):
	"""Browse connection history."""
	ctx.obj = {'recents_size': recents_size}

@recent.command('list')
@click.pass_context
def recent_list(ctx):
	try:
		ps = _profile_store(ctx.obj['recents_size'])
		for key in sorted(ps.list_recent_keys(), reverse=True):
			address, port, proto, username = ps.get_recent(key)
			click.echo(f"{key}: {username}@{address}:{port} [{proto}]")
	except SerializerError as e:
		click.echo(f'Error: {e}')

@recent.command('add')
@click.option('--address', prompt=True)
@click.option('--port', type=click.IntRange(0, 65535), default=22, show_default=True)
@click.option('--protocol', type=click.Choice(PROTOCOLS, case_sensitive=False), default='SFTP', show_default=True)
@click.option('--username', prompt=True)
@click.pass_context
def recent_add(ctx, address, port, protocol, username):
	try:
		ps = _profile_store(ctx.obj['recents_size'])
		key = ps.add_recent(address, port, FileTransferProtocol.from_str(protocol), username)
		ps.persist()
		click.echo(f'Recent {key} added.' if key else 'Already in history.')
	except SerializerError as e:
		click.echo(f'Error: {e}')

@recent.command('delete')
@click.argument('key')
@click.pass_context
def recent_delete(ctx, key):
	try:
		ps = _profile_store(ctx.obj['recents_size'])
		ps.delete_recent(key)
		ps.persist()
		click.echo(f'Recent {key} deleted.')
	except SerializerError as e:
		click.echo(f'Error: {e}')

# --- Settings ---

@cli.group('config')
def config_group():
	"""Show or change settings."""

@config_group.command('show')
def config_show():
	try:
		ss = _settings_store()
	except SerializerError as e:
		click.echo(f'Error: {e}')
		return
	group = ss.get_group_dirs()
	click.echo(f"Text editor: {ss.get_text_editor()}\nDefault protocol: {ss.get_default_protocol()}\nShow hidden files: {ss.get_show_hidden_files()}\nGroup dirs: {group if group else '-'}")

def _update_settings(apply) -> None:
	try:
		ss = _settings_store()
		apply(ss)
		ss.persist()
		click.echo('Configuration saved.')
	except SerializerError as e:
		click.echo(f'Error: {e}')

@config_group.command('set-editor')
@click.argument('path', type=click.Path(path_type=Path))
def config_set_editor(path):
	_update_settings(lambda ss: ss.set_text_editor(path))

@config_group.command('set-protocol')
@click.argument('protocol', type=click.Choice(PROTOCOLS, case_sensitive=False))
def config_set_protocol(protocol):
	_update_settings(lambda ss: ss.set_default_protocol(FileTransferProtocol.from_str(protocol)))

@config_group.command('set-hidden')
@click.option('--hidden/--no-hidden', default=True)
def config_set_hidden(hidden):
	_update_settings(lambda ss: ss.set_show_hidden_files(hidden))

@config_group.command('set-group-dirs')
@click.argument('mode', type=click.Choice(['first', 'last', 'none'], case_sensitive=False))
def config_set_group_dirs(mode):
	value = None if mode.lower() == 'none' else GroupDirs.from_str(mode)
	_update_settings(lambda ss: ss.set_group_dirs(value))

# --- SSH keys ---

@cli.group('ssh-key')
def ssh_key():
	"""Manage stored SSH private keys."""

@ssh_key.command('add')
@click.argument('host')
@click.argument('username')
@click.argument('keyfile', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def ssh_key_add(host, username, keyfile):
	try:
		ss = _settings_store()
		ss.add_ssh_key(host, username, keyfile.read_text(encoding='utf-8'))
		click.echo(f'SSH key for {username}@{host} stored.')
	except (SerializerError, OSError, ValueError) as e:
		click.echo(f'Error: {e}')

@ssh_key.command('list')
def ssh_key_list():
	try:
		ss = _settings_store()
	except SerializerError as e:
		click.echo(f'Error: {e}')
		return
	for key_id in sorted(ss.list_ssh_key_ids()):
		try:
			_host, _username, path = ss.get_ssh_key(key_id)
		except ValueError as e:
			click.echo(f'Error: {e}')
			continue
		click.echo(f"{key_id}: {path}")

@ssh_key.command('delete')
@click.argument('host')
@click.argument('username')
def ssh_key_delete(host, username):
	try:
		_settings_store().delete_ssh_key(host, username)
		click.echo(f'SSH key for {username}@{host} deleted.')
	except SerializerError as e:
		click.echo(f'Error: {e}')

@ssh_key.command('prune')
def ssh_key_prune():
	"""Forget keys whose file has disappeared."""
	try:
		removed = _settings_store().prune_missing_ssh_keys()
	except SerializerError as e:
		click.echo(f'Error: {e}')
		return
	for key_id in removed:
		click.echo(f'Removed {key_id}')
	if not removed:
		click.echo('Nothing to prune.')
