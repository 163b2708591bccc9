"""Project configuration settings.

Constants shared by the stores and the CLI. Default file locations are
resolved on demand so that `TERMPROFILE_DIR` can be overridden at runtime.
"""

from pathlib import Path
import os

# Security / crypto
KEY_LENGTH = 256      # characters in the generated key file
AES_KEY_LENGTH = 32   # AES-256
IV_LENGTH = 12        # GCM nonce
AUTH_TAG_LENGTH = 16  # GCM tag length
HKDF_INFO = b"termprofile-secret-v1"

# Recents
DEFAULT_RECENTS_SIZE = 16
RECENT_KEY_FORMAT = "ISO%Y%m%dT%H%M%S"

# Settings defaults
DEFAULT_TEXT_EDITOR = "nano"
DEFAULT_PROTOCOL = "SFTP"
DEFAULT_GROUP_DIRS = "first"

# File names inside the profile directory
BOOKMARKS_FILE_NAME = "bookmarks.json"
BOOKMARKS_KEY_FILE_NAME = "bookmarks.key"
CONFIG_FILE_NAME = "config.json"
SSH_KEY_DIR_NAME = "ssh-keys"
SSH_KEY_SUFFIX = ".key"


def profile_dir() -> Path:
	env_dir = os.environ.get("TERMPROFILE_DIR")
	return Path(env_dir) if env_dir else Path.home() / ".config" / "termprofile"


def resolve_paths() -> dict:
	"""Return the default profile file locations.

	Keys: bookmarks, key, config, ssh_keys. Directories are not created here.
	"""
	base = profile_dir()
	return {
		"bookmarks": base / BOOKMARKS_FILE_NAME,
		"key": base / BOOKMARKS_KEY_FILE_NAME,
		"config": base / CONFIG_FILE_NAME,
		"ssh_keys": base / SSH_KEY_DIR_NAME,
	}


def default_text_editor() -> str:
	return os.environ.get("EDITOR") or DEFAULT_TEXT_EDITOR


__all__ = [
	'KEY_LENGTH','AES_KEY_LENGTH','IV_LENGTH','AUTH_TAG_LENGTH','HKDF_INFO',
	'DEFAULT_RECENTS_SIZE','RECENT_KEY_FORMAT','DEFAULT_TEXT_EDITOR','DEFAULT_PROTOCOL','DEFAULT_GROUP_DIRS',
	'BOOKMARKS_FILE_NAME','BOOKMARKS_KEY_FILE_NAME','CONFIG_FILE_NAME','SSH_KEY_DIR_NAME','SSH_KEY_SUFFIX',
	'profile_dir','resolve_paths','default_text_editor'
]
