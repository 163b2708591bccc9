"""Key file lifecycle and field-level secret encryption."""
from __future__ import annotations
import base64, binascii, logging, os, secrets, stat, string
from pathlib import Path
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.backends import default_backend
from config.settings import (
	KEY_LENGTH, AES_KEY_LENGTH, IV_LENGTH, AUTH_TAG_LENGTH, HKDF_INFO
)
from .serializer import SerializerError, discard_file

log = logging.getLogger(__name__)

KEY_ALPHABET = string.ascii_letters + string.digits

class CryptoError(Exception):
	pass

def random_alphanumeric(length: int) -> str:
	return ''.join(secrets.choice(KEY_ALPHABET) for _ in range(length))


class KeyManager:
	"""Owns the single symmetric key stored in `key_file`.

	`open()` loads the key if the file exists, otherwise generates a new one
	and writes it. Failures raise an IO `SerializerError`.
	"""

	def __init__(self, key_file: Path):
		self.key_file = Path(key_file)

	def open(self) -> str:
		if self.key_file.exists():
			return self.load()
		return self.generate()

	def load(self) -> str:
		try:
			with open(self.key_file, 'r', encoding='utf-8', newline='') as f:
				return f.read()
		except (OSError, UnicodeDecodeError) as e:
			raise SerializerError.io(e)

	def generate(self) -> str:
		key = random_alphanumeric(KEY_LENGTH)
		try:
			with open(self.key_file, 'w', encoding='utf-8') as f:
				f.write(key)
		except OSError as e:
			# Never leave a partial key behind
			discard_file(self.key_file)
			raise SerializerError.io(e)
		try:
			os.chmod(self.key_file, stat.S_IRUSR)
		except OSError as e:
			log.debug(f"Could not mark {self.key_file} read-only: {e}")
		log.info(f"Generated new key file {self.key_file}")
		return key


class SecretCodec:
	"""AES-256-GCM over base64 text, keyed by a KeyManager key string."""

	def __init__(self, key: str):
		self._backend = default_backend()
		hkdf = HKDF(algorithm=hashes.SHA256(), length=AES_KEY_LENGTH, salt=None, info=HKDF_INFO, backend=self._backend)
		self._key = hkdf.derive(key.encode('utf-8'))

	def encrypt_bytes(self, data: bytes) -> bytes:
		iv = secrets.token_bytes(IV_LENGTH)
		cipher = Cipher(algorithms.AES(self._key), modes.GCM(iv), backend=self._backend)
		enc = cipher.encryptor()
		ct = enc.update(data) + enc.finalize()
		return iv + ct + enc.tag

	def decrypt_bytes(self, blob: bytes) -> bytes:
		if len(blob) < IV_LENGTH + AUTH_TAG_LENGTH: raise CryptoError("Ciphertext too short")
		iv = blob[:IV_LENGTH]; tag = blob[-AUTH_TAG_LENGTH:]; ct = blob[IV_LENGTH:-AUTH_TAG_LENGTH]
		cipher = Cipher(algorithms.AES(self._key), modes.GCM(iv, tag), backend=self._backend)
		dec = cipher.decryptor()
		try:
			return dec.update(ct) + dec.finalize()
		except InvalidTag:
			raise CryptoError("Decrypt failed: authentication tag mismatch")

	def encrypt(self, plaintext: str) -> str:
		return base64.b64encode(self.encrypt_bytes(plaintext.encode('utf-8'))).decode('ascii')

	def decrypt(self, token: str) -> str:
		"""Decrypt a token produced by `encrypt`.

		Wrong key, truncation and corruption all raise a SYNTAX_ERROR
		`SerializerError`; callers cannot tell them apart.
		"""
		try:
			blob = base64.b64decode(token.encode('ascii'), validate=True)
			return self.decrypt_bytes(blob).decode('utf-8')
		except (CryptoError, binascii.Error, UnicodeError) as e:
			raise SerializerError.syntax(e)
