"""String-encoded enums stored in the profile files."""
from __future__ import annotations
from enum import Enum


class FileTransferProtocol(Enum):
	SFTP = "SFTP"
	SCP = "SCP"
	FTP = "FTP"
	FTPS = "FTPS"

	def __str__(self) -> str:
		return self.value

	@classmethod
	def from_str(cls, value: str) -> 'FileTransferProtocol':
		"""Parse case-insensitively; raises ValueError on unknown names."""
		try:
			return cls(value.upper())
		except (AttributeError, ValueError):
			raise ValueError(f"Unknown file transfer protocol: {value!r}")

	@classmethod
	def parse_or_default(cls, value: str) -> 'FileTransferProtocol':
		try:
			return cls.from_str(value)
		except ValueError:
			return cls.SFTP


class GroupDirs(Enum):
	"""How directories are grouped relative to files in the explorer."""
	FIRST = "first"
	LAST = "last"

	def __str__(self) -> str:
		return self.value

	@classmethod
	def from_str(cls, value: str) -> 'GroupDirs':
		try:
			return cls(value.lower())
		except (AttributeError, ValueError):
			raise ValueError(f"Unknown directory grouping: {value!r}")
