############################################################
#
# functions relative to levels
#
############################################################
try:
    from mpi4py import MPI
except ImportError:
    MPI = 0

from numpy import zeros, sqrt, repeat
from time import time
from freesurf.gmg.halo import Halo

# position of the five coefficients of the stencil
# in the last dimension of A
SOUTH, WEST, CENTRE, EAST, NORTH = 0, 1, 2, 3, 4
STENCIL = [(SOUTH, -1, 0), (WEST, 0, -1), (CENTRE, 0, 0),
           (EAST, 0, 1), (NORTH, 1, 0)]


def shifted(x, nh, dj, di):
    """ return the interior of x shifted by (dj, di) points """
    mv, nv = x.shape[:2]
    return x[nh+dj:mv-nh+dj, nh+di:nv-nh+di]


def Gridinfo(n, m, nh, dx, dy, n0, verbose=False, myrank=0):
    """ return the gridinfo vector
    defining a hierarchy of grids

    each level halves the number of points in both directions,
    the coarsening stops when a size becomes odd or when the next
    level would have less than n0 points in one direction
    """
    gridinfo = []
    lev = 0
    flag = 'finest'
    while True:
        gridinfo.append({'n': n, 'm': m, 'nh': nh, 'dx': dx, 'dy': dy,
                         'flag': flag, 'lev': lev})
        if (n % 2 == 1) or (m % 2 == 1) or (n//2 < n0) or (m//2 < n0):
            break
        n = n//2
        m = m//2
        dx = dx*2
        dy = dy*2
        # one point is enough in the halo of the coarser levels
        nh = 1
        flag = 'regular'
        lev += 1

    if lev > 0:
        gridinfo[-1]['flag'] = 'coarsest'

    if myrank == 0 and verbose:
        for info in gridinfo:
            print("Level %2i: %5ix%5i / dx=%3.3g / Flag= %s"
                  % (info['lev'], info['n'], info['m'],
                     info['dx'], info['flag']))

    return gridinfo


class Level(object):

    def __init__(self, gridinfo, neighbours, method, omega, halo=None):

        n = gridinfo['n']
        m = gridinfo['m']
        nh = gridinfo['nh']

        self.dx = gridinfo['dx']
        self.dy = gridinfo['dy']
        self.nh = nh
        self.lev = gridinfo['lev']
        self.flag = gridinfo['flag']
        self.omega = omega

        nv = n+2*nh
        mv = m+2*nh

        self.n = n
        self.m = m
        self.nv = nv
        self.mv = mv
        self.interior = (slice(nh, mv-nh), slice(nh, nv-nh))

        self.set_timers_tozero()

        if halo is None:
            halo = Halo(nh, nv, mv, neighbours, method=method)
        self.halo = halo
        self.myrank = halo.myrank

        self.A = zeros((mv, nv, 5))
        self.invdiag = zeros((mv, nv))
        # work array for the smoother
        self.work = zeros((mv, nv))

    def set_timers_tozero(self):
        # time in sec
        self.time = {'smooth': 0, 'res': 0, 'norm': 0, 'interpolate': 0,
                     'restrict': 0, 'halo': 0, 'reduce': 0}
        # number of calls
        self.ncalls = {'smooth': 0, 'res': 0, 'norm': 0, 'interpolate': 0,
                       'restrict': 0, 'halo': 0, 'reduce': 0}

    def set_A(self, A):
        """ set the operator of this level, A has its halo filled """
        self.A[:, :, :] = A
        diag = self.A[:, :, CENTRE]
        self.invdiag[:, :] = 0.
        self.invdiag[diag != 0] = 1./diag[diag != 0]

    def fill(self, x):
        t0 = time()
        self.halo.fill(x)
        self.time['halo'] += time()-t0
        self.ncalls['halo'] += 1

# ----------------------------------------

    def apply(self, x, y):
        """ y = A*x, x should have its halo filled """
        applyoperator(self.A, x, y, self.nh)
        self.fill(y)

    def smooth(self, x, b, nite):
        """ weighted Jacobi relaxation of A*x = b """
        r = self.work
        for k in range(nite):
            t0 = time()
            computeresidual(self.A, x, b, r, self.nh)
            x[self.interior] += self.omega * \
                r[self.interior]*self.invdiag[self.interior]
            self.time['smooth'] += time()-t0
            self.ncalls['smooth'] += 1

            self.fill(x)

    def residual(self, x, b, r):
        t0 = time()
        computeresidual(self.A, x, b, r, self.nh)
        self.time['res'] += time()-t0
        self.ncalls['res'] += 1

        self.fill(r)

    def norm(self, x):
        """ norm = sqrt(sum(x*x)) """
        t0 = time()
        local_sum = (x[self.interior]**2).sum()
        t1 = time()
        self.time['norm'] += t1-t0
        self.ncalls['norm'] += 1
        z = sqrt(self.allreduce(local_sum))
        self.time['reduce'] += time()-t1
        self.ncalls['reduce'] += 1
        return z

    def inner(self, x, y):
        """ inner = sum(x*y) """
        local_sum = (x[self.interior]*y[self.interior]).sum()
        return self.allreduce(local_sum)

    def allreduce(self, local_sum):
        if self.halo.method == 0:
            return local_sum
        return MPI.COMM_WORLD.allreduce(local_sum, op=MPI.SUM)

# ----------------------------------------


def applyoperator(A, x, y, nh):
    """ y = A*x on the interior points """
    y[nh:-nh, nh:-nh] = 0.
    for k, dj, di in STENCIL:
        y[nh:-nh, nh:-nh] += shifted(A[:, :, k], nh, 0, 0) * \
            shifted(x, nh, dj, di)


def computeresidual(A, x, b, r, nh):
    """ r = b - A*x on the interior points """
    applyoperator(A, x, r, nh)
    r[nh:-nh, nh:-nh] = b[nh:-nh, nh:-nh] - r[nh:-nh, nh:-nh]


def children(x, nh):
    """ return the four children (sw, se, nw, ne) of each coarse cell """
    mv, nv = x.shape[:2]
    sw = x[nh:mv-nh:2, nh:nv-nh:2]
    se = x[nh:mv-nh:2, nh+1:nv-nh:2]
    nw = x[nh+1:mv-nh:2, nh:nv-nh:2]
    ne = x[nh+1:mv-nh:2, nh+1:nv-nh:2]
    return sw, se, nw, ne


def restrict(fine, coarse, x, y):
    """ y on coarse is the sum of x over the four children """
    sw, se, nw, ne = children(x, fine.nh)
    y[coarse.interior] = sw+se+nw+ne


def interpolate(fine, coarse, x, y):
    """ y on fine is the piecewise constant copy of x on coarse """
    xc = x[coarse.interior]
    y[fine.interior] = repeat(repeat(xc, 2, axis=0), 2, axis=1)


def coarsenmatrix(fine, coarse):
    """ return the Galerkin coarse operator Acoarse = P^T * Afine * P

    P being the piecewise constant prolongation. The coarse operator
    remains a five points stencil"""
    A = fine.A
    a, b, c, d = [[child[..., k] for k in range(5)]
                  for child in children(A, fine.nh)]
    # a=sw, b=se, c=nw, d=ne children
    Ac = zeros((coarse.mv, coarse.nv, 5))
    interior = coarse.interior
    Ac[interior + (SOUTH,)] = a[SOUTH] + b[SOUTH]
    Ac[interior + (WEST,)] = a[WEST] + c[WEST]
    Ac[interior + (EAST,)] = b[EAST] + d[EAST]
    Ac[interior + (NORTH,)] = c[NORTH] + d[NORTH]
    # the couplings between the four children stay in the diagonal
    Ac[interior + (CENTRE,)] = (a[CENTRE] + b[CENTRE] + c[CENTRE] + d[CENTRE]
                             + a[EAST] + b[WEST] + c[EAST] + d[WEST]
                             + a[NORTH] + c[SOUTH] + b[NORTH] + d[SOUTH])
    for k in range(5):
        coef = Ac[:, :, k].copy()
        coarse.halo.fill(coef)
        Ac[:, :, k] = coef
    return Ac


def coarsetofine(coarse, fine, x, y):
    """ input = x is on coarse / output = y is on fine """
    t0 = time()
    interpolate(fine, coarse, x, y)
    fine.time['interpolate'] += time()-t0
    fine.ncalls['interpolate'] += 1
    fine.fill(y)


def finetocoarse(fine, coarse, x, y):
    t0 = time()
    restrict(fine, coarse, x, y)
    coarse.time['restrict'] += time()-t0
    coarse.ncalls['restrict'] += 1
    coarse.fill(y)
