import numpy as np
import pytest

from freesurf.param import Param
from freesurf.grid import Grid


@pytest.fixture
def param():
    param = Param()
    param.nx = 32
    param.ny = 32
    param.Lx = 320e3
    param.Ly = 320e3
    param.tol = 1e-10
    param.maxite = 100
    return param


@pytest.fixture
def grid(param):
    """ closed basin of uniform depth """
    grid = Grid(param)
    grid.set_depth(1000.)
    return grid


@pytest.fixture
def seamount(param):
    """ closed basin with a seamount in the middle """
    grid = Grid(param)
    r2 = (grid.xr-160e3)**2+(grid.yr-160e3)**2
    grid.set_depth(1000.-600.*np.exp(-r2/(50e3)**2))
    return grid


@pytest.fixture
def bump(seamount):
    """ gaussian anomaly of the free surface, 1 m high """
    grid = seamount
    r2 = (grid.xr-120e3)**2+(grid.yr-200e3)**2
    eta = np.exp(-r2/(40e3)**2)*grid.msk
    grid.fill_halo(eta)
    return eta
