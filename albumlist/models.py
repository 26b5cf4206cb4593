from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from albumlist.text_utils import album_key


@dataclass(frozen=True)
class AlbumEntry:
    artist: str
    album: str

    @property
    def key(self) -> str:
        return album_key(self.artist, self.album)


@dataclass(frozen=True)
class SearchCandidate:
    id: str
    name: str
    primary_artist_name: str = ""

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "SearchCandidate":
        artists = item.get("artists") or []
        primary = (artists[0] or {}).get("name", "") if artists else ""
        return cls(id=item.get("id", ""), name=item.get("name") or "", primary_artist_name=primary or "")


@dataclass(frozen=True)
class ResolvedAlbum:
    id: str
    source: str = ""  # override, strict or loose


@dataclass(frozen=True)
class Token:
    access_token: str
    expires_in: int = 0
    refresh_token: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Token":
        return cls(
            access_token=payload["access_token"],
            expires_in=int(payload.get("expires_in") or 0),
            refresh_token=payload.get("refresh_token"),
        )

    def __repr__(self) -> str:
        return f"Token(expires_in={self.expires_in})"


@dataclass(frozen=True)
class Playlist:
    id: str
    url: str


@dataclass(frozen=True)
class MissRecord:
    artist: str
    album: str

    def to_dict(self) -> Dict[str, str]:
        return {"artist": self.artist, "album": self.album}


@dataclass
class MissReport:
    generated_at: str
    playlist_name: str
    misses: List[MissRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "playlistName": self.playlist_name,
            "misses": [m.to_dict() for m in self.misses],
        }
