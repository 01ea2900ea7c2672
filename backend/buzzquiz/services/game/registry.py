from typing import Dict, Iterator, List, Optional, Tuple

from buzzquiz.models import Player


class PlayerRegistry:
    """Durable player id -> Player, for the life of the process.

    Players are never removed; a disconnect only clears the connection
    handle so score and identity survive a rejoin.
    """

    def __init__(self):
        self._players: Dict[str, Player] = {}

    def __contains__(self, player_id: str) -> bool:
        return player_id in self._players

    def __iter__(self) -> Iterator[Tuple[str, Player]]:
        return iter(list(self._players.items()))

    def get(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    def add(self, player_id: str, name: str, sid: str) -> Player:
        player = Player(name=name, score=0, sid=sid, connected=True)
        self._players[player_id] = player
        return player

    def reconnect(self, player_id: str, name: str, sid: str) -> Player:
        player = self._players[player_id]
        player.name = name
        player.sid = sid
        player.connected = True
        return player

    def find_by_sid(self, sid: str) -> Optional[Tuple[str, Player]]:
        if sid is None:
            return None
        for player_id, player in self._players.items():
            if player.sid == sid:
                return player_id, player
        return None

    def mark_disconnected(self, sid: str) -> Optional[Tuple[str, Player]]:
        entry = self.find_by_sid(sid)
        if entry:
            _, player = entry
            player.connected = False
            player.sid = None
        return entry

    def connected_ids(self) -> List[str]:
        return [pid for pid, p in self._players.items() if p.connected]

    def reset_scores(self) -> None:
        for player in self._players.values():
            player.score = 0

    def snapshot(self) -> List[dict]:
        """Connected players as name/score, highest score first.

        Always rebuilt from the registry; ties keep join order.
        """
        players = [p.to_dict() for p in self._players.values() if p.connected]
        return sorted(players, key=lambda p: p['score'], reverse=True)
