from src.bl_common.enums import Side
from src.bl_common.errors import InvalidSideError


def parse_side(side: object) -> Side:
    """Accept Side, a bool (True = YES) or 'yes'/'no' in any case."""
    if isinstance(side, Side):
        return side
    if isinstance(side, bool):
        return Side.from_bool(side)
    if isinstance(side, str):
        try:
            return Side(side.strip().upper())
        except ValueError:
            pass
    raise InvalidSideError(side)
