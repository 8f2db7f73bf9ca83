from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple
from gameday.config import settings
from gameday.domain import Game
from gameday.services.team_config import TeamConfigMap, local_teams
from gameday.utils.kickoff import (
    get_time_slot_context, is_confirmed_slot, is_405_game, parse_kickoff,
    THURSDAY_NIGHT, FRIDAY_NIGHT, SUNDAY_NIGHT, MONDAY_NIGHT, SATURDAY, EARLY, GAMES,
)
import logging

logger = logging.getLogger(__name__)

TBD = 'TBD'

# Marquee slots get a descriptive bucket name instead of "{network} {slot} Games"
MARQUEE_GROUP_NAMES = {
    THURSDAY_NIGHT: 'Thursday Night Football - {network}',
    FRIDAY_NIGHT: 'Friday Night Football - {network}',
    SUNDAY_NIGHT: 'Sunday Night Football - {network}',
    MONDAY_NIGHT: 'Monday Night Football - {network}',
    SATURDAY: 'Saturday Games - {network}',
}

GameGroups = Dict[str, List[Game]]

@dataclass
class BroadcastBoard:
    """Confirmed and TBD buckets for one week, both in display order"""
    confirmed: GameGroups = field(default_factory=dict)
    tbd: GameGroups = field(default_factory=dict)
    local_override_ids: Set[str] = field(default_factory=set)

    def confirmed_games(self) -> List[Game]:
        return [g for games in self.confirmed.values() for g in games]

    def tbd_games(self) -> List[Game]:
        return [g for games in self.tbd.values() for g in games]

def network_of(game: Game) -> str:
    return game.broadcast or TBD

def is_nfl_network(broadcast: Optional[str]) -> bool:
    lower = (broadcast or '').lower()
    return 'nfl net' in lower or lower in ('nfln', 'nfl network')

def filter_games(games: Iterable[Game], is_local_game: Callable[[Game], bool]) -> List[Game]:
    """Drop NFL Network games and the 4:05 PM duplicate slot (kept for the local team)"""
    filtered = []
    for game in games:
        if is_nfl_network(game.broadcast):
            continue
        if is_405_game(game.time_display) and not is_local_game(game):
            continue
        filtered.append(game)
    return filtered

def split_confirmed(games: Iterable[Game]) -> Tuple[List[Game], List[Game]]:
    confirmed, tbd = [], []
    for game in games:
        (confirmed if is_confirmed_slot(game.time_display) else tbd).append(game)
    return confirmed, tbd

def apply_local_override(
    filtered: List[Game],
    confirmed: List[Game],
    tbd: List[Game],
    is_local_game: Callable[[Game], bool],
) -> Tuple[List[Game], List[Game], Set[str]]:
    """Surface every local-team game as confirmed and clear its broadcast window from TBD

    Returns new (confirmed, tbd) lists plus the ids of games that were moved
    into confirmed by this rule. It can only add to confirmed and remove from
    TBD.
    """
    confirmed = list(confirmed)
    tbd = list(tbd)
    moved = set()

    for local_game in (g for g in filtered if is_local_game(g)):
        if any(g.id == local_game.id for g in tbd):
            tbd = [g for g in tbd if g.id != local_game.id]
            confirmed.append(local_game)
            moved.add(local_game.id)

        window = (network_of(local_game), get_time_slot_context(local_game.time_display))
        kept = []
        for game in tbd:
            same_window = (network_of(game), get_time_slot_context(game.time_display)) == window
            if same_window and not is_local_game(game):
                logger.debug(f"Dropping {game.matchup} from TBD, shares {window} with {local_game.matchup}")
                continue
            kept.append(game)
        tbd = kept

    return confirmed, tbd, moved

def group_key(network: Optional[str], slot: str) -> str:
    network = network or TBD
    # "TBD Games" rather than "TBD Games Games"
    if slot == GAMES:
        return f"{network} {GAMES}"
    if network == TBD:
        return f"TBD {slot} Games"
    template = MARQUEE_GROUP_NAMES.get(slot)
    if template:
        return template.format(network=network)
    return f"{network} {slot} Games"

def game_sort_key(game: Game, year: Optional[int] = None):
    """Kickoff ascending (unparseable last), then matchup ignoring case, then id"""
    return (
        parse_kickoff(game.time_display, year if year is not None else game.year),
        game.matchup.casefold(),
        game.id,
    )

def sort_games(games: Iterable[Game], year: Optional[int] = None) -> List[Game]:
    return sorted(games, key=lambda g: game_sort_key(g, year))

def group_by_network_and_slot(games: Iterable[Game], year: Optional[int] = None) -> GameGroups:
    grouped: GameGroups = {}
    for game in games:
        key = group_key(game.broadcast, get_time_slot_context(game.time_display))
        grouped.setdefault(key, []).append(game)
    return {key: sort_games(members, year) for key, members in grouped.items()}

def split_single_game_groups(grouped: GameGroups) -> Tuple[List[Game], GameGroups]:
    """Separate one-game groups (eligible for promotion) from real TBD groups"""
    singles: List[Game] = []
    multi: GameGroups = {}
    for key, games in grouped.items():
        if len(games) == 1:
            singles.extend(games)
        else:
            multi[key] = games
    return singles, multi

def is_early_bucket(key: str) -> bool:
    return key.endswith(f" {EARLY} Games")

def bucket_sort_key(key: str):
    return (key.startswith(TBD), not is_early_bucket(key), key.casefold(), key)

def order_buckets(keys: Iterable[str]) -> List[str]:
    """Non-TBD before TBD; Early first inside each; then alphabetical"""
    return sorted(keys, key=bucket_sort_key)

def ordered_groups(grouped: GameGroups) -> GameGroups:
    return {key: grouped[key] for key in order_buckets(grouped)}

class BroadcastService:
    """Splits a week's schedule into confirmed and TBD broadcast buckets"""

    def __init__(self, team_configs: TeamConfigMap, promote_single_game_groups: Optional[bool] = None):
        self.team_configs = team_configs
        self.local_teams = local_teams(team_configs)
        if promote_single_game_groups is None:
            promote_single_game_groups = settings.promote_single_game_groups
        self.promote_single_game_groups = promote_single_game_groups

    def is_local_team_game(self, game: Game) -> bool:
        return game.involves(self.local_teams)

    def classify(self, games: Iterable[Game], year: Optional[int] = None) -> BroadcastBoard:
        games = list(games)
        filtered = filter_games(games, self.is_local_team_game)
        confirmed, tbd = split_confirmed(filtered)
        confirmed, tbd, moved = apply_local_override(filtered, confirmed, tbd, self.is_local_team_game)

        tbd_grouped = group_by_network_and_slot(tbd, year)
        if self.promote_single_game_groups:
            singles, tbd_grouped = split_single_game_groups(tbd_grouped)
            confirmed = confirmed + singles

        board = BroadcastBoard(
            confirmed=ordered_groups(group_by_network_and_slot(confirmed, year)),
            tbd=ordered_groups(tbd_grouped),
            local_override_ids=moved,
        )
        logger.info(
            f"Classified {len(games)} games: {len(filtered)} shown, "
            f"{len(board.confirmed_games())} confirmed in {len(board.confirmed)} buckets, "
            f"{len(board.tbd_games())} TBD in {len(board.tbd)} buckets"
        )
        return board
