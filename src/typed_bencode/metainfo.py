"""
Shapes for BitTorrent metainfo (.torrent) files.
"""
import hashlib
from dataclasses import dataclass
from typing import List, Optional

from .config import DEFAULT_CONFIG, BencodeConfig
from .decoder import decode
from .shapes import BYTES, LONG, RAW, STRING, Field, ListOf, Record

PIECE_HASH_LEN = 20  # SHA-1 digest per piece


@dataclass
class FileEntry:
    length: int
    path: List[str]
    md5sum: Optional[str] = None

    @property
    def joined_path(self) -> str:
        return "/".join(self.path)


@dataclass
class Info:
    name: str
    piece_length: int
    pieces: bytes
    length: Optional[int] = None
    files: Optional[List[FileEntry]] = None
    private: int = 0

    def __post_init__(self):
        if self.length is None and self.files is None:
            raise ValueError("Invalid torrent: info needs either 'length' or 'files'")
        if len(self.pieces) % PIECE_HASH_LEN:
            raise ValueError("Invalid torrent: 'pieces' is not a multiple of 20 bytes")

    @property
    def is_multi(self) -> bool:
        return self.files is not None

    @property
    def piece_hashes(self) -> List[bytes]:
        return [self.pieces[i:i + PIECE_HASH_LEN] for i in range(0, len(self.pieces), PIECE_HASH_LEN)]

    @property
    def file_list(self) -> List[FileEntry]:
        """Files in the torrent; single-file torrents yield one entry named after the torrent."""
        if self.is_multi:
            return list(self.files)
        return [FileEntry(length=self.length, path=[self.name])]

    @property
    def total_length(self) -> int:
        return sum(f.length for f in self.file_list)

    @property
    def num_pieces(self) -> int:
        return len(self.pieces) // PIECE_HASH_LEN

    @property
    def last_piece_length(self) -> int:
        return (self.total_length % self.piece_length) or self.piece_length


@dataclass
class TorrentMetadata:
    info: Info
    announce: Optional[str] = None
    announce_list: Optional[List[List[str]]] = None
    creation_date: Optional[int] = None
    created_by: Optional[str] = None
    comment: Optional[str] = None
    encoding: Optional[str] = None
    publisher: Optional[str] = None
    publisher_url: Optional[str] = None

    def __repr__(self):
        return (
            f"TorrentMetadata(name={self.info.name!r}, files={len(self.info.file_list)}, "
            f"pieces={self.info.num_pieces}, multi={self.info.is_multi}, announce={self.announce!r})"
        )


FILE_ENTRY_SHAPE = Record("FileEntry", [
    Field("length", LONG),
    Field("path", ListOf(STRING)),
    Field("md5sum", STRING, default=None),
], factory=FileEntry)

INFO_SHAPE = Record("Info", [
    Field("name", STRING),
    Field("piece length", LONG, attr="piece_length"),
    Field("pieces", BYTES),
    Field("length", LONG, default=None),
    Field("files", ListOf(FILE_ENTRY_SHAPE), default=None),
    Field("private", LONG, default=0),
], factory=Info)

TORRENT_SHAPE = Record("TorrentMetadata", [
    Field("info", INFO_SHAPE),
    Field("announce", STRING, default=None),
    Field("announce-list", ListOf(ListOf(STRING)), default=None, attr="announce_list"),
    Field("creation date", LONG, default=None, attr="creation_date"),
    Field("created by", STRING, default=None, attr="created_by"),
    Field("comment", STRING, default=None),
    Field("encoding", STRING, default=None),
    Field("publisher", STRING, default=None),
    Field("publisher-url", STRING, default=None, attr="publisher_url"),
], factory=TorrentMetadata)

# Only the exact bytes of the info dictionary, everything else skipped
_INFO_BYTES_SHAPE = Record("InfoBytes", [Field("info", RAW)])


def decode_metainfo(data, config: Optional[BencodeConfig] = None) -> TorrentMetadata:
    """Decodes a .torrent file; keys outside the known metainfo fields are ignored."""
    config = (config if config is not None else DEFAULT_CONFIG).with_options(ignore_unknown_keys=True)
    return decode(data, TORRENT_SHAPE, config)


def info_hash(data) -> bytes:
    """
    SHA-1 over the exact bencoded 'info' dictionary, as the BitTorrent
    protocol requires. Works on the raw bytes, not a re-encoding.
    """
    info_bytes = decode(data, _INFO_BYTES_SHAPE, ignore_unknown_keys=True)["info"]
    return hashlib.sha1(info_bytes).digest()
