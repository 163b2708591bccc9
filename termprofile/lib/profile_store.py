"""Bookmarks + recents store.

Bookmarks are durable, user-named hosts whose passwords are encrypted with
the store key. Recents are an auto-named history of connections, bounded by
`recents_size` and keyed by a sortable timestamp so that the oldest entry is
always the lexicographically smallest key.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from config.settings import DEFAULT_RECENTS_SIZE, RECENT_KEY_FORMAT
from .crypto import KeyManager, SecretCodec
from .protocol import FileTransferProtocol
from .serializer import BookmarkSerializer, HostEntry, SerializerError, UserHosts, read_file, valid_port, write_file

log = logging.getLogger(__name__)

Bookmark = Tuple[str, int, FileTransferProtocol, str, Optional[str]]
Recent = Tuple[str, int, FileTransferProtocol, str]


def utc_now() -> datetime:
	# Local time repeats an hour when DST ends; recent keys must not
	return datetime.now(timezone.utc)


class ProfileStore:
	def __init__(self, bookmarks_file: Path, key_file: Path, recents_size: int = DEFAULT_RECENTS_SIZE,
			clock: Callable[[], datetime] = utc_now):
		self.bookmarks_file = Path(bookmarks_file)
		self.recents_size = recents_size
		self.hosts = UserHosts()
		self._clock = clock
		# Key must exist before any secret can be written
		self.key = KeyManager(key_file).open()
		self._codec = SecretCodec(self.key)
		if self.bookmarks_file.exists():
			self.reload()
		else:
			self.persist()
			log.info(f"Initialised empty bookmarks file {self.bookmarks_file}")

	# Bookmarks

	def list_bookmark_names(self) -> List[str]:
		return list(self.hosts.bookmarks)

	def get_bookmark(self, name: str) -> Optional[Bookmark]:
		entry = self.hosts.bookmarks.get(name)
		if entry is None:
			return None
		password = None
		if entry.password is not None:
			try:
				password = self._codec.decrypt(entry.password)
			except SerializerError as e:
				log.warning(f"Could not decrypt password for bookmark '{name}': {e}")
		return (
			entry.address, entry.port, FileTransferProtocol.parse_or_default(entry.protocol),
			entry.username, password,
		)

	def add_bookmark(self, name: str, address: str, port: int, protocol: FileTransferProtocol,
			username: str, password: Optional[str] = None) -> None:
		if not name:
			raise ValueError("Bookmark name can't be empty")
		self.hosts.bookmarks[name] = self._make_entry(address, port, protocol, username, password)

	def delete_bookmark(self, name: str) -> None:
		self.hosts.bookmarks.pop(name, None)

	# Recents

	def list_recent_keys(self) -> List[str]:
		return list(self.hosts.recents)

	def get_recent(self, key: str) -> Optional[Recent]:
		# Recents never carry a password
		entry = self.hosts.recents.get(key)
		if entry is None:
			return None
		return (entry.address, entry.port, FileTransferProtocol.parse_or_default(entry.protocol), entry.username)

	def add_recent(self, address: str, port: int, protocol: FileTransferProtocol, username: str) -> Optional[str]:
		"""Record a connection in the history.

		Returns the new key, or None when the host was already present (or
		the cache holds no entries at all).
		"""
		host = self._make_entry(address, port, protocol, username, None)
		if host in self.hosts.recents.values():
			return None
		if self.recents_size <= 0:
			return None
		new_key = self._next_recent_key()
		for key in sorted(self.hosts.recents):
			if len(self.hosts.recents) < self.recents_size:
				break
			del self.hosts.recents[key]
			log.debug(f"Evicted recent {key}")
		self.hosts.recents[new_key] = host
		return new_key

	def delete_recent(self, key: str) -> None:
		self.hosts.recents.pop(key, None)

	# I/O

	def persist(self) -> None:
		"""Write bookmarks and recents to disk, replacing the previous file."""
		write_file(self.bookmarks_file, BookmarkSerializer(), self.hosts)

	def reload(self) -> None:
		self.hosts = read_file(self.bookmarks_file, BookmarkSerializer())

	def _make_entry(self, address: str, port: int, protocol: FileTransferProtocol, username: str,
			password: Optional[str]) -> HostEntry:
		if not valid_port(port):
			raise ValueError(f"Invalid port: {port!r}")
		return HostEntry(
			address=address,
			port=port,
			protocol=str(protocol),
			username=username,
			password=None if password is None else self._codec.encrypt(password),
		)

	def _next_recent_key(self) -> str:
		base = self._clock().strftime(RECENT_KEY_FORMAT)
		same_second = [k for k in self.hosts.recents if k.startswith(base)]
		if not same_second:
			return base
		# Suffixed keys sort after `base` and before the next second
		newest = max(same_second)
		n = len(same_second)
		key = f"{base}.{n:03d}"
		while key <= newest:
			n += 1
			key = f"{base}.{n:03d}"
		return key

