import numpy as np
import pytest

from freesurf.grid import Grid


def test_closed_basin(grid):
    nh = grid.nh
    assert grid.msk.shape == (32+2*nh, 32+2*nh)
    assert np.all(grid.msk[grid.interior] == 1)
    assert np.all(grid.msk[:nh, :] == 0)
    assert np.all(grid.msk[-nh:, :] == 0)
    assert np.all(grid.msk[:, :nh] == 0)
    assert np.all(grid.msk[:, -nh:] == 0)
    assert grid.topology == ('bounded', 'bounded')
    assert grid.dx == pytest.approx(10e3)
    assert grid.Az == pytest.approx(1e8)
    assert grid.area == pytest.approx(320e3**2)
    assert grid.volume == pytest.approx(320e3**2*1000.)
    assert grid.Lz == pytest.approx(1000.)
    assert grid.dz == pytest.approx(1000.)


@pytest.mark.parametrize('geometry, topology',
                         [('perio', ('periodic', 'periodic')),
                          ('xperio', ('periodic', 'bounded')),
                          ('yperio', ('bounded', 'periodic'))])
def test_topology(param, geometry, topology):
    param.geometry = geometry
    grid = Grid(param)
    grid.set_depth(500.)
    assert grid.topology == topology
    if geometry == 'perio':
        assert np.all(grid.msk == 1)
        assert np.all(grid.H == 500.)


def test_depth_halo_is_filled(param):
    param.geometry = 'perio'
    grid = Grid(param)
    H = 100.+np.arange(32*32, dtype=float).reshape((32, 32))
    grid.set_depth(H)
    nh = grid.nh
    assert np.array_equal(grid.H[:nh, nh:-nh], H[-nh:, :])
    assert np.array_equal(grid.H[nh:-nh, -nh:], H[:, :nh])
    assert grid.Lz == pytest.approx(H.max())


def test_land_cells(param):
    grid = Grid(param)
    H = np.full((32, 32), 1000.)
    H[10:12, 5:9] = 0.
    H[20, 20] = -50.
    grid.set_depth(H)
    nh = grid.nh
    assert grid.msk[nh+10, nh+5] == 0
    assert grid.msk[nh+20, nh+20] == 0
    assert grid.H[nh+20, nh+20] == 0.
    assert grid.area == pytest.approx((32*32-9)*grid.Az)


def test_depth_with_wrong_shape(param):
    grid = Grid(param)
    with pytest.raises(ValueError):
        grid.set_depth(np.ones((10, 10)))


def test_depth_with_nans(param):
    grid = Grid(param)
    H = np.full((32, 32), 1000.)
    H[3, 4] = np.nan
    with pytest.raises(ValueError):
        grid.set_depth(H)


def test_nonpositive_Lz(param):
    param.Lz = 0.
    grid = Grid(param)
    with pytest.raises(ValueError):
        grid.set_depth(1000.)


def test_subdomains_should_divide_the_grid(param):
    param.npx = 3
    with pytest.raises(ValueError):
        Grid(param)


def test_invalid_geometry(param):
    param.geometry = 'sphere'
    with pytest.raises(ValueError):
        Grid(param)


def test_Lz_follows_the_depth(param):
    grid = Grid(param)
    grid.set_depth(1000.)
    assert grid.Lz == pytest.approx(1000.)
    grid.set_depth(3000.)
    assert grid.Lz == pytest.approx(3000.)
    assert grid.dz == pytest.approx(3000.)


def test_prescribed_Lz_is_kept(param):
    param.Lz = 5000.
    param.nz = 10
    grid = Grid(param)
    grid.set_depth(1000.)
    grid.set_depth(3000.)
    assert grid.Lz == 5000.
    assert grid.dz == pytest.approx(500.)


def test_allreduce(grid):
    assert grid.allreduce(3.5) == 3.5
    assert grid.allreduce(2., 'max') == 2.
    with pytest.raises(ValueError):
        grid.allreduce(1., 'min')
