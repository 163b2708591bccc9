import io
import json
import pytest
from pathlib import Path
from termprofile.lib.serializer import (
    BookmarkSerializer, ConfigSerializer, HostEntry, SerializerError, SerializerErrorKind,
    UserConfig, UserHosts,
)
from termprofile.lib.protocol import FileTransferProtocol, GroupDirs


def test_error_strings():
    err = SerializerError.io(PermissionError(13, 'Permission denied'))
    assert str(err) == 'IO error (permission denied)'
    assert str(SerializerError(SerializerErrorKind.SYNTAX_ERROR)) == 'Syntax error'
    assert str(SerializerError.syntax('bad')) == 'Syntax error (bad)'


def test_host_entry_equality_includes_password():
    a = HostEntry('h', 22, 'SFTP', 'u')
    assert a == HostEntry('h', 22, 'SFTP', 'u')
    assert a != HostEntry('h', 22, 'SFTP', 'u', 'enc')
    assert a != HostEntry('h', 2222, 'SFTP', 'u')


def test_bookmarks_keep_ciphertext_verbatim():
    hosts = UserHosts(
        bookmarks={'b': HostEntry('h', 22, 'SCP', 'u', 'q83vEjRWeJA=+/')},
        recents={'ISO20210101T000000': HostEntry('h', 22, 'SFTP', 'u')},
    )
    buf = io.StringIO()
    BookmarkSerializer().serialize(buf, hosts)
    assert 'password' not in json.loads(buf.getvalue())['recents']['ISO20210101T000000']
    buf.seek(0)
    assert BookmarkSerializer().deserialize(buf) == hosts


def test_bookmarks_missing_tables_default_empty():
    assert BookmarkSerializer().deserialize(io.StringIO('{}')) == UserHosts()


@pytest.mark.parametrize('doc', [
    '[]',
    '{"bookmarks": []}',
    '{"bookmarks": {"a": {"address": "h", "port": 22, "protocol": "SFTP"}}}',
    '{"bookmarks": {"a": {"address": "h", "port": "22", "protocol": "SFTP", "username": "u"}}}',
    '{"bookmarks": {"a": {"address": "h", "port": 70000, "protocol": "SFTP", "username": "u"}}}',
    '{"recents": {"k": {"address": "h", "port": 22, "protocol": "SFTP", "username": "u", "password": 1}}}',
    'not json at all',
])
def test_bookmarks_syntax_errors(doc):
    with pytest.raises(SerializerError) as exc:
        BookmarkSerializer().deserialize(io.StringIO(doc))
    assert exc.value.kind is SerializerErrorKind.SYNTAX_ERROR


def test_config_partial_document_uses_defaults(monkeypatch):
    monkeypatch.delenv('EDITOR', raising=False)
    cfg = ConfigSerializer().deserialize(io.StringIO('{"user_interface": {"show_hidden_files": true}}'))
    assert cfg.user_interface.show_hidden_files is True
    assert cfg.user_interface.text_editor == Path('nano')
    assert cfg.user_interface.default_protocol == str(FileTransferProtocol.SFTP)
    assert cfg.user_interface.group_dirs == str(GroupDirs.FIRST)
    assert cfg.remote.ssh_keys == {}


def test_config_roundtrip():
    cfg = UserConfig()
    cfg.user_interface.group_dirs = None
    cfg.remote.ssh_keys['pi@host'] = Path('/keys/pi@host.key')
    buf = io.StringIO()
    ConfigSerializer().serialize(buf, cfg)
    buf.seek(0)
    assert ConfigSerializer().deserialize(buf) == cfg


@pytest.mark.parametrize('doc', [
    '{"user_interface": {"show_hidden_files": "yes"}}',
    '{"user_interface": {"text_editor": 3}}',
    '{"remote": {"ssh_keys": {"pi@host": 5}}}',
    '{"remote": []}',
])
def test_config_syntax_errors(doc):
    with pytest.raises(SerializerError) as exc:
        ConfigSerializer().deserialize(io.StringIO(doc))
    assert exc.value.kind is SerializerErrorKind.SYNTAX_ERROR


def test_protocol_parsing():
    assert FileTransferProtocol.from_str('sftp') is FileTransferProtocol.SFTP
    assert FileTransferProtocol.from_str('FTPS') is FileTransferProtocol.FTPS
    assert FileTransferProtocol.parse_or_default('nope') is FileTransferProtocol.SFTP
    with pytest.raises(ValueError):
        FileTransferProtocol.from_str('nope')
    assert GroupDirs.from_str('LAST') is GroupDirs.LAST
    with pytest.raises(ValueError):
        GroupDirs.from_str('middle')
