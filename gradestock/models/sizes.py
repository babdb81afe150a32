"""Size grid constants shared by models and services."""
import enum


# Canonical order used for grids, diffs and reports
SIZES = ('P', 'M', 'G', 'GG', 'G1', 'G2', 'G3')

STANDARD_SIZES = ('P', 'M', 'G', 'GG')
PLUS_SIZES = ('G1', 'G2', 'G3')


class GridType(enum.Enum):
    """Size grid offered when a reference is created."""
    PADRAO = "PADRAO"
    PLUS = "PLUS"


def sizes_for_grid(grid_type) -> tuple:
    """Return the sizes of a grid type (accepts the enum or its value)."""
    if isinstance(grid_type, str):
        grid_type = GridType(grid_type.upper())
    if grid_type == GridType.PLUS:
        return PLUS_SIZES
    return STANDARD_SIZES


def size_sort_key(size: str):
    """Canonical sizes first (in grid order), anything else alphabetically after."""
    if size in SIZES:
        return (0, SIZES.index(size), size)
    return (1, 0, size)
