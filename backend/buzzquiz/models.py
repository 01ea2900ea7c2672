from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class GamePhase(str, Enum):
    LOBBY = 'lobby'
    PLAYING = 'playing'  # between rounds, waiting for the host to play a track
    ROUND_ACTIVE = 'round-active'
    GUESSING = 'guessing'
    ROUND_END = 'round-end'
    GAME_OVER = 'game-over'


# Phase names as the player screen understands them on rejoin
REJOIN_PHASES = {
    GamePhase.LOBBY: 'lobby',
    GamePhase.PLAYING: 'await-round',
    GamePhase.ROUND_ACTIVE: 'round-active',
    GamePhase.GUESSING: 'guessing',
    GamePhase.ROUND_END: 'round-end',
    GamePhase.GAME_OVER: 'game-over',
}


@dataclass
class Player:
    name: str
    score: int = 0
    sid: Optional[str] = None
    connected: bool = True

    def to_dict(self):
        return {
            'name': self.name,
            'score': self.score,
        }


@dataclass
class Song:
    title: str
    artists: List[str] = field(default_factory=list)
    track_ref: Optional[str] = None
    artwork_ref: Optional[str] = None

    @classmethod
    def from_payload(cls, data: dict) -> 'Song':
        artists = data.get('artists') or []
        if isinstance(artists, str):
            artists = [artists]
        elif not isinstance(artists, (list, tuple)):
            artists = []
        return cls(
            title=data.get('title'),
            artists=[str(a) for a in artists],
            track_ref=data.get('trackRef'),
            artwork_ref=data.get('artworkRef'),
        )

    def to_dict(self):
        return {
            'title': self.title,
            'artists': list(self.artists),
            'trackRef': self.track_ref,
            'artworkRef': self.artwork_ref,
        }
