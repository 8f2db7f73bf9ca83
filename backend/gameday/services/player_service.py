from typing import Dict, List, Optional, Any
import logging
from sqlalchemy import or_
from sqlalchemy.orm import Session
from gameday.models.players import Player

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_LIMIT = 100

# How many players per position make up a team's starting lineup
STARTER_LIMITS = {
    'QB': 1,
    'RB': 2,
    'WR': 4,
    'TE': 1,
    'K': 1,
}

POSITION_ORDER = {'QB': 1, 'RB': 2, 'WR': 3, 'TE': 4, 'K': 5, 'DEF': 6}

class PlayerService:
    """Read side of the synced Sleeper player table"""

    def __init__(self, db: Session):
        self.db = db

    def get_players(
        self,
        ids: Optional[List[str]] = None,
        team: Optional[str] = None,
        position: Optional[str] = None,
        active: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = DEFAULT_PLAYER_LIMIT
    ) -> List[Player]:
        """Players matching every given filter, ordered by search rank then last name

        The limit only applies when no explicit ids are requested.
        """
        query = self.db.query(Player)

        if ids:
            query = query.filter(Player.player_id.in_(ids))
        if team:
            query = query.filter(Player.team == team.upper())
        if position:
            query = query.filter(Player.position == position.upper())
        if active is not None:
            query = query.filter(Player.active == active)
        if search:
            term = f"%{search.lower()}%"
            query = query.filter(or_(
                Player.full_name.ilike(term),
                Player.first_name.ilike(term),
                Player.last_name.ilike(term)
            ))

        # Unranked players go last
        query = query.order_by(
            Player.search_rank.is_(None),
            Player.search_rank.asc(),
            Player.last_name.asc()
        )
        if not ids:
            query = query.limit(limit)
        return query.all()

    def get_depth_chart(self, team: str, position: str, limit: Optional[int] = None) -> List[Player]:
        """Active players at a position for a team, in depth chart order"""
        query = self.db.query(Player).filter(
            Player.team == team.upper(),
            Player.position == position.upper(),
            Player.active.is_(True),
            Player.depth_chart_order.isnot(None)
        ).order_by(Player.depth_chart_order.asc(), Player.search_rank.asc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def get_team_starters(self, team: str) -> Dict[str, List[Player]]:
        return {
            position: self.get_depth_chart(team, position, limit)
            for position, limit in STARTER_LIMITS.items()
        }

    def get_starters(self, home_team: str, away_team: str) -> Dict[str, Dict[str, List[Player]]]:
        """Projected starters for both sides of a matchup"""
        return {
            'home_team': self.get_team_starters(home_team),
            'away_team': self.get_team_starters(away_team),
        }

    def build_roster_view(self, roster: Dict[str, Any]) -> List[Dict[str, Any]]:
        """A Sleeper roster as display rows: starters first, then by position and name"""
        player_ids = roster.get('players') or []
        starters = set(roster.get('starters') or [])
        players = {p.player_id: p for p in self.get_players(ids=player_ids)} if player_ids else {}

        rows = []
        for player_id in player_ids:
            player = players.get(player_id)
            rows.append({
                'player_id': player_id,
                'name': player.full_name if player and player.full_name else f"Player {player_id[-4:]}",
                'position': player.position if player else None,
                'team': player.team if player else None,
                'injury_status': player.injury_status if player else None,
                'is_starter': player_id in starters,
            })

        return sorted(rows, key=roster_sort_key)

def roster_sort_key(row: Dict[str, Any]):
    return (
        not row['is_starter'],
        POSITION_ORDER.get(row['position'] or '', len(POSITION_ORDER) + 1),
        (row['name'] or '').casefold(),
    )
