import numpy as np


class LateralAreas(object):
    """ vertically integrated lateral areas of the cell faces

    x[j, i] is the area of the west face of cell (j, i)
    y[j, i] is the area of the south face of cell (j, i)
    """

    def __init__(self, grid):
        check_grid(grid)
        self.x = np.zeros((grid.nyl, grid.nxl))
        self.y = np.zeros((grid.nyl, grid.nxl))
        compute_vertically_integrated_lateral_areas(grid, self)


def check_grid(grid):
    if grid.H is None:
        raise ValueError('the grid has no depth, call grid.set_depth first')
    if grid.H.shape != (grid.nyl, grid.nxl):
        raise ValueError('depth has shape %s, expected %s'
                         % (grid.H.shape, (grid.nyl, grid.nxl)))
    if np.any(grid.H < 0):
        raise ValueError('depth should be positive')
    if not(grid.Lz > 0):
        raise ValueError('Lz should be positive, got %s' % grid.Lz)


def vertical_integral(grid, h):
    """ integral of dz over the water column of depth h """
    if grid.bottom_cells == 'partial':
        return np.minimum(h, grid.Lz)
    elif grid.bottom_cells == 'full':
        # a level is wet unless its centre lies strictly below the bottom
        nlev = np.floor(h/grid.dz+0.5)
        return grid.dz*np.clip(nlev, 0, grid.nz)
    else:
        raise ValueError('unknown bottom_cells "%s"' % grid.bottom_cells)


def compute_vertically_integrated_lateral_areas(grid, areas):
    """ fill areas.x and areas.y, halo included

    the depth of a face is the smallest depth of the two cells that
    share it, it is zero as soon as one of them is land """
    H = grid.H*grid.msk
    nh = grid.nh
    inner = grid.interior
    # west face of (j, i) is shared with (j, i-1)
    hx = np.minimum(H[inner], H[nh:-nh, nh-1:-nh-1])
    # south face of (j, i) is shared with (j-1, i)
    hy = np.minimum(H[inner], H[nh-1:-nh-1, nh:-nh])

    areas.x[inner] = vertical_integral(grid, hx)*grid.dy
    areas.y[inner] = vertical_integral(grid, hy)*grid.dx

    grid.fill_halo(areas.x)
    grid.fill_halo(areas.y)
    return areas
