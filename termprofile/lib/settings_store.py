"""Application settings + SSH key vault.

SSH keys are kept as one file per `username@host` under `ssh_key_dir`; the
settings file records where each one lives. Adding or deleting a key
touches the key file first and then commits the settings file, so the two
only diverge if the process dies (or the persist fails) in between.
`prune_missing_ssh_keys()` repairs that case.
"""
from __future__ import annotations
import logging, os
from pathlib import Path
from typing import List, Optional, Tuple
from config.settings import SSH_KEY_SUFFIX
from .protocol import FileTransferProtocol, GroupDirs
from .serializer import ConfigSerializer, SerializerError, SerializerErrorKind, UserConfig, read_file, write_file

log = logging.getLogger(__name__)

SshHost = Tuple[str, str, Path]  # host, username, private key path


class SettingsStore:
	def __init__(self, config_file: Path, ssh_key_dir: Path):
		self.config_file = Path(config_file)
		self.ssh_key_dir = Path(ssh_key_dir)
		self.config = UserConfig()
		if not self.ssh_key_dir.exists():
			try:
				self.ssh_key_dir.mkdir(mode=0o700)
			except OSError as e:
				raise SerializerError(
					SerializerErrorKind.IO_ERROR,
					f'Could not create SSH key directory "{self.ssh_key_dir}": {e}',
				)
		if self.config_file.exists():
			self.reload()
		else:
			self.persist()
			log.info(f"Initialised default configuration {self.config_file}")

	# Text editor

	def get_text_editor(self) -> Path:
		return self.config.user_interface.text_editor

	def set_text_editor(self, path: Path) -> None:
		self.config.user_interface.text_editor = Path(path)

	# Default protocol

	def get_default_protocol(self) -> FileTransferProtocol:
		return FileTransferProtocol.parse_or_default(self.config.user_interface.default_protocol)

	def set_default_protocol(self, proto: FileTransferProtocol) -> None:
		self.config.user_interface.default_protocol = str(proto)

	# Explorer

	def get_show_hidden_files(self) -> bool:
		return self.config.user_interface.show_hidden_files

	def set_show_hidden_files(self, value: bool) -> None:
		self.config.user_interface.show_hidden_files = value

	def get_group_dirs(self) -> Optional[GroupDirs]:
		raw = self.config.user_interface.group_dirs
		if raw is None:
			return None
		try:
			return GroupDirs.from_str(raw)
		except ValueError:
			return None

	def set_group_dirs(self, value: Optional[GroupDirs]) -> None:
		self.config.user_interface.group_dirs = None if value is None else str(value)

	# SSH keys

	def add_ssh_key(self, host: str, username: str, ssh_key: str) -> None:
		"""Store `ssh_key` on disk and register it; commits the settings file."""
		host_key = make_ssh_host_key(host, username)
		key_path = self.ssh_key_dir / f"{host_key}{SSH_KEY_SUFFIX}"
		# Key files live flat in ssh_key_dir
		if '/' in host_key or os.sep in host_key or key_path.parent != self.ssh_key_dir:
			raise ValueError(f"Invalid SSH host key: {host_key!r}")
		try:
			fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
			with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
				f.write(ssh_key)
		except OSError as e:
			raise SerializerError.io(e)
		self.config.remote.ssh_keys[host_key] = key_path
		log.info(f"Added SSH key for {host_key}")
		self.persist()

	def delete_ssh_key(self, host: str, username: str) -> None:
		"""Unregister and unlink a key; absent keys are a no-op."""
		host_key = make_ssh_host_key(host, username)
		key_path = self.config.remote.ssh_keys.pop(host_key, None)
		if key_path is None:
			return
		try:
			Path(key_path).unlink()
		except OSError as e:
			raise SerializerError.io(e)
		log.info(f"Deleted SSH key for {host_key}")
		self.persist()

	def get_ssh_key(self, host_key: str) -> Optional[SshHost]:
		key_path = self.config.remote.ssh_keys.get(host_key)
		if key_path is None:
			return None
		host, username = get_ssh_tokens(host_key)
		return host, username, Path(key_path)

	def list_ssh_key_ids(self) -> List[str]:
		return list(self.config.remote.ssh_keys)

	def prune_missing_ssh_keys(self) -> List[str]:
		"""Drop vault entries whose key file is gone; persists if any were dropped."""
		missing = [k for k, p in self.config.remote.ssh_keys.items() if not Path(p).is_file()]
		for host_key in missing:
			del self.config.remote.ssh_keys[host_key]
			log.warning(f"SSH key file for {host_key} is missing; entry removed")
		if missing:
			self.persist()
		return missing

	# I/O

	def persist(self) -> None:
		"""Write the configuration to disk, replacing the previous file."""
		write_file(self.config_file, ConfigSerializer(), self.config)

	def reload(self) -> None:
		self.config = read_file(self.config_file, ConfigSerializer())


def make_ssh_host_key(host: str, username: str) -> str:
	return f"{username}@{host}"


def get_ssh_tokens(host_key: str) -> Tuple[str, str]:
	"""Split `username@host` into (host, username).

	Only this module builds vault keys, so a malformed one is a caller bug
	and raises ValueError.
	"""
	username, sep, host = host_key.rpartition('@')
	if not sep or not username or not host:
		raise ValueError(f"Invalid SSH host key: {host_key!r}")
	return host, username
