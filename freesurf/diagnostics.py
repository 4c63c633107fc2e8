import numpy as np
from freesurf.gmg.level import shifted


class Diag(object):
    def __init__(self, param, grid):
        self.list_param = ['gravity']
        param.copy(self, self.list_param)

        self.list_grid = ['msk', 'nh', 'area', 'Az', 'dx', 'dy',
                          'interior']
        grid.copy(self, self.list_grid)
        self.grid = grid

    def global_sum(self, z2d):
        local = np.sum(z2d[self.interior]*self.msk[self.interior])
        return self.grid.allreduce(local)

    def volume(self, eta):
        """ volume anomaly sum(Az*eta) """
        return self.global_sum(eta)*self.Az

    def potential_energy(self, eta, g=None):
        """ 0.5*g*sum(Az*eta**2) """
        if g is None:
            g = self.gravity
        return 0.5*g*self.global_sum(eta**2)*self.Az

    def divergence(self, qu, qv):
        """ divergence of the volume fluxes, in m^3/s per cell

        qu and qv are the vertically integrated velocities at x-faces
        and y-faces, with their halo filled """
        nh = self.nh
        div = np.zeros_like(self.msk, dtype=float)
        div[self.interior] = self.dy*(shifted(qu, nh, 0, 1) -
                                      shifted(qu, nh, 0, 0)) \
            + self.dx*(shifted(qv, nh, 1, 0)-shifted(qv, nh, 0, 0))
        div *= self.msk
        return div

    def continuity_residual(self, eta_new, eta_old, qu, qv, dt):
        """ max of |eta_new - eta_old + dt*div(Q)/Az| over the fluid
        cells, Q being the fluxes that moved eta_old to eta_new """
        div = self.divergence(qu, qv)
        res = (eta_new-eta_old)*self.msk + dt*div/self.Az
        local = np.max(np.abs(res[self.interior]))
        return self.grid.allreduce(local, 'max')

    def integrals(self, eta):
        eta2 = eta**2
        self.vol = self.volume(eta)
        self.pe = self.potential_energy(eta)
        local_max = np.max(np.abs(eta[self.interior]*self.msk[self.interior]))
        self.etamax = self.grid.allreduce(local_max, 'max')
        # rms of eta over the fluid area
        self.etarms = np.sqrt(self.global_sum(eta2)*self.Az/self.area)
