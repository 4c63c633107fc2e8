import numpy as np
from time import time
from freesurf.lateral_areas import LateralAreas
from freesurf.operators import create_matrix
from freesurf.rhs import implicit_free_surface_right_hand_side
from freesurf.gmg.hierarchy import Gmg


class ImplicitFreeSurfaceSolver(object):
    """ multigrid solver of the implicit free surface equation

        [∇·H∇ - 1/(g Δt²)] ηⁿ⁺¹ = (∇ʰ·Q★ - ηⁿ/Δt) / (g Δt)

    for a fluid of depth H, barotropic volume flux Q★, time step Δt,
    gravitational acceleration g and free surface ηⁿ.

    The operator depends on Δt: it is built on the first solve and
    rebuilt each time Δt differs from the previous one.
    """

    def __init__(self, param, grid, gravitational_acceleration=None):
        self.list_param = ['gravity', 'myrank', 'verbose']
        param.copy(self, self.list_param)
        if gravitational_acceleration is not None:
            self.gravity = gravitational_acceleration

        self.grid = grid
        self.vertically_integrated_lateral_areas = LateralAreas(grid)
        self.right_hand_side = np.zeros((grid.nyl, grid.nxl))
        self.multigrid_solver = Gmg(param, grid)

        # None means that no operator has been built yet
        self.previous_dt = None
        self.nrebuild = 0
        self.nite = 0
        self.res = 0.

        self.set_timers_tozero()

    def set_timers_tozero(self):
        # time in sec
        self.time = {'operator': 0., 'solve': 0., 'rhs': 0.}
        # number of calls
        self.ncalls = {'operator': 0, 'solve': 0, 'rhs': 0}
        # multigrid iterations summed over the solves
        self.nite_total = 0

    def operator_state(self, dt):
        """ 'stale' if the operator should be (re)built for dt,
        'current' otherwise"""
        if (self.previous_dt is None) or (dt != self.previous_dt):
            return 'stale'
        else:
            return 'current'

    def rebuild_operator(self, g, dt):
        areas = self.vertically_integrated_lateral_areas
        t0 = time()
        operator = create_matrix(self.grid, areas.x, areas.y, g, dt)
        self.multigrid_solver.set_operator(operator)
        self.time['operator'] += time()-t0
        self.ncalls['operator'] += 1
        self.previous_dt = dt
        self.nrebuild += 1
        if (self.myrank == 0) and self.verbose:
            print('rebuilt the free surface operator for dt = %g' % dt)

    def solve(self, eta, rhs, g, dt):
        """ solve for eta, modified in place

        eta is the first guess, rhs the right hand side """
        if self.operator_state(dt) == 'stale':
            self.rebuild_operator(g, dt)

        t0 = time()
        self.nite, self.res = self.multigrid_solver.solve(eta, rhs)
        self.time['solve'] += time()-t0
        self.ncalls['solve'] += 1
        self.nite_total += self.nite

    def compute_right_hand_side(self, g, dt, fluxes, eta, rhs=None):
        """ evaluate the right hand side in rhs (default is
        self.right_hand_side) and fill its halo """
        if rhs is None:
            rhs = self.right_hand_side
        t0 = time()
        implicit_free_surface_right_hand_side(rhs, self.grid, g, dt,
                                              fluxes, eta)
        self.grid.fill_halo(rhs)
        self.time['rhs'] += time()-t0
        self.ncalls['rhs'] += 1
        return rhs

    def print_timers(self):
        print('-'*50)
        for key in ['operator', 'rhs', 'solve']:
            n = max(self.ncalls[key], 1)
            print('%10s : %6.2f s / %6i calls / %6.2e' %
                  (key, self.time[key], self.ncalls[key], self.time[key]/n))
        print('-'*50)
        nsolve = max(self.ncalls['solve'], 1)
        print('operator rebuilds = %i / solves = %i / mean nite = %.1f' %
              (self.nrebuild, self.ncalls['solve'],
               self.nite_total*1./nsolve))
