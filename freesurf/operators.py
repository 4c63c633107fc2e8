"""Elliptic operator of the implicit free surface

    [∇·H∇ - 1/(g Δt²)] η

discretized in its volume integrated form on cell centres,

    δx(∫Ax δxη/Δx) + δy(∫Ay δyη/Δy) - Az η/(g Δt²)

where ∫Ax and ∫Ay are the vertically integrated lateral areas.
"""
import numpy as np
import scipy.sparse as sp

from freesurf.gmg.level import SOUTH, WEST, CENTRE, EAST, NORTH, STENCIL, \
    shifted, applyoperator


class StencilOperator(object):
    """ five points stencil operator

    A[:, :, k] contains the coefficient multiplying the (south, west,
    centre, east, north) neighbour, on the local grid including the
    halo. dt is the time step used to build it """

    def __init__(self, A, nh, dt=None):
        self.A = A
        self.nh = nh
        self.dt = dt

    @property
    def shape(self):
        mv, nv = self.A.shape[:2]
        return (mv-2*self.nh, nv-2*self.nh)

    def apply(self, x, y):
        """ y = A*x on the interior points, x has its halo filled """
        applyoperator(self.A, x, y, self.nh)
        return y

    def tocsr(self):
        """ return the operator as a scipy sparse matrix acting on the
        interior points flattened in C order (valid on a single subdomain)

        neighbours across the domain boundary are wrapped, this is
        exact for periodic directions and harmless for walls where the
        coefficients vanish """
        m, n = self.shape
        N = m*n
        idx = np.arange(N).reshape((m, n))
        rows = []
        cols = []
        data = []
        for k, dj, di in STENCIL:
            rows.append(idx.ravel())
            cols.append(np.roll(idx, (-dj, -di), axis=(0, 1)).ravel())
            data.append(shifted(self.A[:, :, k], self.nh, 0, 0).ravel())
        rows = np.concatenate(rows)
        cols = np.concatenate(cols)
        data = np.concatenate(data)
        mat = sp.coo_matrix((data, (rows, cols)), shape=(N, N)).tocsr()
        mat.eliminate_zeros()
        return mat


def check_coefficients(g, dt):
    if not(g > 0):
        raise ValueError('gravitational acceleration should be positive,'
                         ' got %s' % g)
    # a negative dt gives the same operator as -dt, only dt = 0 and
    # non finite values are meaningless
    if (dt == 0) or not(np.isfinite(dt)):
        raise ValueError('time step should be nonzero and finite, got %s'
                         % dt)


def create_matrix(grid, areax, areay, g, dt):
    """ return the StencilOperator of the implicit free surface equation

    areax, areay are the vertically integrated lateral areas at x-faces
    and y-faces with their halo filled. The result does not depend on
    anything else than the arguments """
    check_coefficients(g, dt)

    nh = grid.nh
    A = np.zeros((grid.nyl, grid.nxl, 5))
    inner = grid.interior

    A[inner + (WEST,)] = shifted(areax, nh, 0, 0)/grid.dx
    A[inner + (EAST,)] = shifted(areax, nh, 0, 1)/grid.dx
    A[inner + (SOUTH,)] = shifted(areay, nh, 0, 0)/grid.dy
    A[inner + (NORTH,)] = shifted(areay, nh, 1, 0)/grid.dy
    A[inner + (CENTRE,)] = -(A[inner + (WEST,)] + A[inner + (EAST,)]
                             + A[inner + (SOUTH,)] + A[inner + (NORTH,)]) \
        - grid.Az/(g*dt**2)

    for k in range(5):
        coef = A[:, :, k].copy()
        grid.fill_halo(coef)
        A[:, :, k] = coef

    return StencilOperator(A, nh, dt=dt)


def implicit_free_surface_linear_operation(L, eta, grid, areax, areay,
                                           g, dt):
    """ matrix free version of the operator: L = A*eta

    eta has its halo filled, the halo of L is filled on output """
    check_coefficients(g, dt)

    nh = grid.nh
    eta0 = shifted(eta, nh, 0, 0)
    # fluxes across the four faces of each cell
    fw = shifted(areax, nh, 0, 0)*(eta0-shifted(eta, nh, 0, -1))/grid.dx
    fe = shifted(areax, nh, 0, 1)*(shifted(eta, nh, 0, 1)-eta0)/grid.dx
    fs = shifted(areay, nh, 0, 0)*(eta0-shifted(eta, nh, -1, 0))/grid.dy
    fn = shifted(areay, nh, 1, 0)*(shifted(eta, nh, 1, 0)-eta0)/grid.dy

    L[grid.interior] = (fe-fw) + (fn-fs) - grid.Az*eta0/(g*dt**2)
    grid.fill_halo(L)
    return L
