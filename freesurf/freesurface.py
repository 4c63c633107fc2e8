import numpy as np
from freesurf.implicit_solver import ImplicitFreeSurfaceSolver
from freesurf.diagnostics import Diag
from freesurf.gmg.level import shifted


class ImplicitFreeSurface(object):
    """ implicit time step of the linear free surface

    given the barotropic transports Q★ predicted without the surface
    pressure gradient, step() solves for the new free surface and
    returns the transports corrected by the new surface gradient

    the depth of the grid should be set before """

    def __init__(self, param, grid, gravitational_acceleration=None):
        self.list_param = ['myrank', 'verbose']
        param.copy(self, self.list_param)

        self.grid = grid
        self.solver = ImplicitFreeSurfaceSolver(
            param, grid, gravitational_acceleration=gravitational_acceleration)
        self.gravity = self.solver.gravity
        self.diag = Diag(param, grid)
        self.diag.gravity = self.gravity

        self.eta = np.zeros((grid.nyl, grid.nxl))

        # faces are open when both adjacent cells are fluid
        nh = grid.nh
        msk = grid.msk
        self.mskx = np.zeros_like(msk)
        self.msky = np.zeros_like(msk)
        self.mskx[grid.interior] = shifted(msk, nh, 0, 0)*shifted(msk, nh, 0, -1)
        self.msky[grid.interior] = shifted(msk, nh, 0, 0)*shifted(msk, nh, -1, 0)
        grid.fill_halo(self.mskx)
        grid.fill_halo(self.msky)

    def set_eta(self, eta):
        """ set the free surface, eta has the local shape (nyl, nxl) """
        self.eta[:, :] = eta*self.grid.msk
        self.grid.fill_halo(self.eta)

    def step(self, qu, qv, dt):
        """ advance eta by dt, qu and qv are the predicted transports

        return the corrected transports (qu, qv), the inputs are
        left untouched"""
        grid = self.grid
        qu = qu*self.mskx
        qv = qv*self.msky
        grid.fill_halo(qu)
        grid.fill_halo(qv)

        g = self.gravity
        rhs = self.solver.compute_right_hand_side(g, dt, (qu, qv), self.eta)
        self.solver.solve(self.eta, rhs, g, dt)

        self.barotropic_correction(qu, qv, dt)
        return qu, qv

    def barotropic_correction(self, qu, qv, dt):
        """ remove g*dt*H*grad(eta) from the transports, in place """
        grid = self.grid
        nh = grid.nh
        areas = self.solver.vertically_integrated_lateral_areas
        g = self.gravity
        eta0 = shifted(self.eta, nh, 0, 0)
        detax = (eta0-shifted(self.eta, nh, 0, -1))/grid.dx
        detay = (eta0-shifted(self.eta, nh, -1, 0))/grid.dy

        qu[grid.interior] -= g*dt*shifted(areas.x, nh, 0, 0)/grid.dy*detax
        qv[grid.interior] -= g*dt*shifted(areas.y, nh, 0, 0)/grid.dx*detay
        grid.fill_halo(qu)
        grid.fill_halo(qv)
