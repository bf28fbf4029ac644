"""
The world-tour board: 40 fixed tiles plus lookup helpers.
"""

from typing import List, Optional, Sequence, Tuple

from worldopoly.core.game.tiles import Tile, TileType

BOARD_SIZE = 40


def _prop(tile_id: int, name: str, group: str, price: int, house_cost: int, *rent: int) -> Tile:
    return Tile(tile_id, name, TileType.PROPERTY, price, tuple(rent), house_cost, group)


def _railroad(tile_id: int, name: str) -> Tile:
    return Tile(tile_id, name, TileType.RAILROAD, 200, (25,), 0, "Railroad")


def _utility(tile_id: int, name: str) -> Tile:
    return Tile(tile_id, name, TileType.UTILITY, 150, (), 0, "Utility")


BOARD_TILES: Tuple[Tile, ...] = (
    # Bottom row (0-10)
    Tile(0, "GO", TileType.GO),
    _prop(1, "Egypt", "Brown", 60, 50, 2, 10, 30, 90, 160, 250),
    Tile(2, "Community Chest", TileType.COMMUNITY_CHEST),
    _prop(3, "Kenya", "Brown", 60, 50, 4, 20, 60, 180, 320, 450),
    Tile(4, "Income Tax", TileType.TAX, price=200),
    _railroad(5, "TGV"),
    _prop(6, "Peru", "LightBlue", 100, 50, 6, 30, 90, 270, 400, 550),
    _prop(7, "Argentina", "LightBlue", 100, 50, 6, 30, 90, 270, 400, 550),
    Tile(8, "Chance", TileType.CHANCE),
    _prop(9, "Brazil", "LightBlue", 120, 50, 8, 40, 100, 300, 450, 600),
    Tile(10, "Jail", TileType.JAIL),
    # Left side (11-20)
    _prop(11, "Philippines", "Pink", 140, 100, 10, 50, 150, 450, 625, 750),
    _utility(12, "Electric Company"),
    _prop(13, "Vietnam", "Pink", 140, 100, 10, 50, 150, 450, 625, 750),
    _prop(14, "Thailand", "Pink", 160, 100, 12, 60, 180, 500, 700, 900),
    _railroad(15, "Shinkansen"),
    _prop(16, "India", "Orange", 180, 100, 14, 70, 200, 550, 750, 950),
    Tile(17, "Community Chest", TileType.COMMUNITY_CHEST),
    _prop(18, "Mexico", "Orange", 180, 100, 14, 70, 200, 550, 750, 950),
    _prop(19, "Turkey", "Orange", 200, 100, 16, 80, 220, 600, 800, 1000),
    Tile(20, "Free Parking", TileType.FREE_PARKING),
    # Top row (21-30)
    _prop(21, "Italy", "Red", 220, 150, 18, 90, 250, 700, 875, 1050),
    Tile(22, "Chance", TileType.CHANCE),
    _prop(23, "Spain", "Red", 220, 150, 18, 90, 250, 700, 875, 1050),
    _prop(24, "France", "Red", 240, 150, 20, 100, 300, 750, 925, 1100),
    _railroad(25, "Orient Express"),
    _prop(26, "South Korea", "Yellow", 260, 150, 22, 110, 330, 800, 975, 1150),
    _prop(27, "Singapore", "Yellow", 260, 150, 22, 110, 330, 800, 975, 1150),
    _utility(28, "Water Works"),
    _prop(29, "Australia", "Yellow", 280, 150, 24, 120, 360, 850, 1025, 1200),
    Tile(30, "Deported", TileType.GO_TO_JAIL),
    # Right side (31-39)
    _prop(31, "Canada", "Green", 300, 200, 26, 130, 390, 900, 1100, 1275),
    _prop(32, "Germany", "Green", 300, 200, 26, 130, 390, 900, 1100, 1275),
    Tile(33, "Community Chest", TileType.COMMUNITY_CHEST),
    _prop(34, "Japan", "Green", 320, 200, 28, 150, 450, 1000, 1200, 1400),
    _railroad(35, "Maglev"),
    Tile(36, "Chance", TileType.CHANCE),
    _prop(37, "United Kingdom", "DarkBlue", 350, 200, 35, 175, 500, 1100, 1300, 1500),
    Tile(38, "Luxury Tax", TileType.TAX, price=100),
    _prop(39, "United States", "DarkBlue", 400, 200, 50, 200, 600, 1400, 1700, 2000),
)


def create_board() -> Tuple[Tile, ...]:
    """Return a fresh board with no owners and no houses."""
    return BOARD_TILES


def get_group(board: Sequence[Tile], group: Optional[str]) -> List[Tile]:
    """All tiles sharing a group key."""
    if group is None:
        return []
    return [t for t in board if t.group == group]


def owns_group(board: Sequence[Tile], player_id: int, group: Optional[str]) -> bool:
    """Monopoly gate: True if the player owns every tile of the group."""
    members = get_group(board, group)
    return bool(members) and all(t.owner_id == player_id for t in members)


def group_has_buildings(board: Sequence[Tile], group: Optional[str]) -> bool:
    return any(t.houses > 0 for t in get_group(board, group))


def count_owned(board: Sequence[Tile], player_id: int, tile_type: TileType) -> int:
    """Count tiles of a type owned by a player."""
    return sum(1 for t in board if t.type == tile_type and t.owner_id == player_id)


def find_nearest(board: Sequence[Tile], position: int, tile_type: TileType) -> Optional[int]:
    """Find the nearest tile of the given type moving forward from position."""
    for offset in range(1, BOARD_SIZE):
        pos = (position + offset) % BOARD_SIZE
        if board[pos].type == tile_type:
            return pos
    return None


def steps_to(position: int, target: int) -> int:
    """Forward step count from position to target, wrapping past GO."""
    return (target - position) % BOARD_SIZE
