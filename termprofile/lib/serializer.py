"""Serialization layer: profile data classes + JSON (de)serializers.

The stores only ever talk to `BookmarkSerializer` and `ConfigSerializer`
through `serialize(writer, state)` / `deserialize(reader)`. The wire format
is indented JSON; encrypted passwords are stored as opaque base64 strings.
"""
from __future__ import annotations
import json, logging, os
from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, IO, Optional
from config.settings import DEFAULT_PROTOCOL, DEFAULT_GROUP_DIRS, default_text_editor

log = logging.getLogger(__name__)


class SerializerErrorKind(Enum):
	IO_ERROR = "IO error"
	SYNTAX_ERROR = "Syntax error"


class SerializerError(Exception):
	"""Error raised by the stores; `kind` tells I/O failures from bad data."""

	def __init__(self, kind: SerializerErrorKind, desc: Optional[str] = None):
		self.kind = kind
		self.desc = desc
		super().__init__(str(self))

	def __str__(self) -> str:
		if self.desc:
			return f"{self.kind.value} ({self.desc})"
		return self.kind.value

	@classmethod
	def io(cls, err: Any) -> 'SerializerError':
		return cls(SerializerErrorKind.IO_ERROR, _describe(err))

	@classmethod
	def syntax(cls, desc: Any = None) -> 'SerializerError':
		return cls(SerializerErrorKind.SYNTAX_ERROR, None if desc is None else _describe(desc))


def _describe(err: Any) -> str:
	# OSError str() carries "[Errno N] ..."; prefer the bare reason
	if isinstance(err, OSError) and err.strerror:
		reason = err.strerror[0].lower() + err.strerror[1:]
		return f"{reason}: {err.filename}" if err.filename else reason
	return str(err)


def valid_port(port: Any) -> bool:
	return not isinstance(port, bool) and isinstance(port, int) and 0 <= port <= 65535


@dataclass
class HostEntry:
	address: str
	port: int
	protocol: str
	username: str
	password: Optional[str] = None

	@classmethod
	def from_dict(cls, raw: Any) -> 'HostEntry':
		if not isinstance(raw, dict):
			raise SerializerError.syntax('host entry must be a table')
		try:
			address, port, protocol, username = raw['address'], raw['port'], raw['protocol'], raw['username']
		except KeyError as e:
			raise SerializerError.syntax(f"missing field {e}")
		password = raw.get('password')
		if not isinstance(address, str) or not isinstance(protocol, str) or not isinstance(username, str):
			raise SerializerError.syntax('address, protocol and username must be strings')
		if not valid_port(port):
			raise SerializerError.syntax(f"invalid port {port!r}")
		if password is not None and not isinstance(password, str):
			raise SerializerError.syntax('password must be a string')
		return cls(address, port, protocol, username, password)

	def to_dict(self) -> Dict[str, Any]:
		out = asdict(self)
		if out['password'] is None:
			out.pop('password')
		return out


@dataclass
class UserHosts:
	bookmarks: Dict[str, HostEntry] = field(default_factory=dict)
	recents: Dict[str, HostEntry] = field(default_factory=dict)


@dataclass
class UserInterfaceConfig:
	text_editor: Path = field(default_factory=lambda: Path(default_text_editor()))
	default_protocol: str = DEFAULT_PROTOCOL
	show_hidden_files: bool = False
	group_dirs: Optional[str] = DEFAULT_GROUP_DIRS


@dataclass
class RemoteConfig:
	ssh_keys: Dict[str, Path] = field(default_factory=dict)


@dataclass
class UserConfig:
	user_interface: UserInterfaceConfig = field(default_factory=UserInterfaceConfig)
	remote: RemoteConfig = field(default_factory=RemoteConfig)


def _load_json(reader: IO[str]) -> Dict[str, Any]:
	try:
		data = json.load(reader)
	except (json.JSONDecodeError, UnicodeDecodeError) as e:
		raise SerializerError.syntax(e)
	except OSError as e:
		raise SerializerError.io(e)
	if not isinstance(data, dict):
		raise SerializerError.syntax('top-level document must be a table')
	return data


def _dump_json(writer: IO[str], obj: Dict[str, Any]) -> None:
	try:
		json.dump(obj, writer, indent=2)
		writer.write("\n")
	except OSError as e:
		raise SerializerError.io(e)


def _table(data: Dict[str, Any], name: str) -> Dict[str, Any]:
	value = data.get(name, {})
	if not isinstance(value, dict):
		raise SerializerError.syntax(f"'{name}' must be a table")
	return value


class BookmarkSerializer:
	def serialize(self, writer: IO[str], hosts: UserHosts) -> None:
		_dump_json(writer, {
			'bookmarks': {k: v.to_dict() for k, v in hosts.bookmarks.items()},
			'recents': {k: v.to_dict() for k, v in hosts.recents.items()},
		})

	def deserialize(self, reader: IO[str]) -> UserHosts:
		data = _load_json(reader)
		return UserHosts(
			bookmarks={str(k): HostEntry.from_dict(v) for k, v in _table(data, 'bookmarks').items()},
			recents={str(k): HostEntry.from_dict(v) for k, v in _table(data, 'recents').items()},
		)


class ConfigSerializer:
	def serialize(self, writer: IO[str], config: UserConfig) -> None:
		ui = config.user_interface
		_dump_json(writer, {
			'user_interface': {
				'text_editor': str(ui.text_editor),
				'default_protocol': ui.default_protocol,
				'show_hidden_files': ui.show_hidden_files,
				'group_dirs': ui.group_dirs,
			},
			'remote': {'ssh_keys': {k: str(p) for k, p in config.remote.ssh_keys.items()}},
		})

	def deserialize(self, reader: IO[str]) -> UserConfig:
		data = _load_json(reader)
		raw_ui = _table(data, 'user_interface')
		raw_remote = _table(data, 'remote')
		ui = UserInterfaceConfig()
		if 'text_editor' in raw_ui:
			ui.text_editor = Path(_expect(raw_ui, 'text_editor', str))
		if 'default_protocol' in raw_ui:
			ui.default_protocol = _expect(raw_ui, 'default_protocol', str)
		if 'show_hidden_files' in raw_ui:
			ui.show_hidden_files = _expect(raw_ui, 'show_hidden_files', bool)
		if 'group_dirs' in raw_ui:
			ui.group_dirs = None if raw_ui['group_dirs'] is None else _expect(raw_ui, 'group_dirs', str)
		ssh_keys = {}
		for vault_key, path in _table(raw_remote, 'ssh_keys').items():
			if not isinstance(path, str):
				raise SerializerError.syntax(f"ssh key path for '{vault_key}' must be a string")
			ssh_keys[str(vault_key)] = Path(path)
		return UserConfig(user_interface=ui, remote=RemoteConfig(ssh_keys=ssh_keys))


def _expect(table: Dict[str, Any], name: str, kind: type) -> Any:
	value = table[name]
	if not isinstance(value, kind):
		raise SerializerError.syntax(f"'{name}' must be {kind.__name__}")
	return value


def write_file(path: Path, serializer: Any, state: Any) -> None:
	"""Serialize `state` into `path`, replacing its previous contents.

	Data goes to a sibling `.tmp` file first and is moved over `path` once
	complete, so a failed write leaves the old file untouched.
	"""
	path = Path(path)
	tmp = path.with_name(path.name + '.tmp')
	try:
		with open(tmp, 'w', encoding='utf-8') as f:
			serializer.serialize(f, state)
		os.replace(tmp, path)
	except OSError as e:
		discard_file(tmp)
		raise SerializerError.io(e)
	except SerializerError:
		discard_file(tmp)
		raise


def read_file(path: Path, serializer: Any) -> Any:
	try:
		with open(path, 'r', encoding='utf-8') as f:
			return serializer.deserialize(f)
	except OSError as e:
		raise SerializerError.io(e)


def discard_file(path: Path) -> None:
	try:
		path.unlink()
	except FileNotFoundError:
		pass
	except OSError as e:
		log.debug(f"Could not remove {path}: {e}")
