###########################################################
#
# functions relative to multigrid
#
############################################################
from numpy import zeros
from freesurf.gmg.level import Gridinfo, Level, coarsenmatrix, \
    coarsetofine, finetocoarse


class Gmg(object):
    """ geometric multigrid solver for a five points stencil operator

    the operator is provided (and can be replaced) with set_operator,
    the coarse operators are obtained by Galerkin coarsening """

    def __init__(self, param, grid):

        self.list_param = ['cycle', 'maxite', 'tol', 'npre', 'npost',
                           'ndeepest', 'nvcyc', 'omega', 'n0',
                           'nite_diverge', 'verbose', 'myrank']
        param.copy(self, self.list_param)

        if self.myrank == 0 and self.verbose:
            print('-'*50)
            print(' Multigrid hierarchy')
            print('-'*50)

        n = grid.nx//grid.npx
        m = grid.ny//grid.npy
        self.info = Gridinfo(n, m, grid.nh, grid.dx, grid.dy, self.n0,
                             verbose=self.verbose, myrank=self.myrank)
        self.nlevs = len(self.info)

        self.cycles = {'vcycle': self.Vsolve,
                       'fcycle': self.Fsolve,
                       'mgpcg': self.pcgsolve}
        if self.cycle not in self.cycles:
            raise ValueError('unknown multigrid cycle "%s"' % self.cycle)

        self.operator = None
        self.setup_hierarchy(grid)

    def setup_hierarchy(self, grid):
        """ main initialisation part of the multigrid """
        # define the grids hierarchy, the finest level shares
        # the halo of the model grid
        self.grid = []
        for lev in range(self.nlevs):
            if lev == 0:
                halo = grid.halo
            else:
                halo = None
            self.grid.append(Level(self.info[lev], grid.neighbours,
                                   grid.halomethod, self.omega, halo=halo))

        self.x = []
        self.b = []
        self.r = []
        for lev in range(self.nlevs):
            mv = self.grid[lev].mv
            nv = self.grid[lev].nv
            # x is the field
            # b is the RHS
            # r is the residual r=b-A*x
            self.x.append(zeros((mv, nv)))
            self.b.append(zeros((mv, nv)))
            self.r.append(zeros((mv, nv)))

        # work arrays for the conjugate gradient
        g = self.grid[0]
        self.rr = zeros((g.mv, g.nv))
        self.p = zeros((g.mv, g.nv))
        self.q = zeros((g.mv, g.nv))
        self.z = zeros((g.mv, g.nv))

    def set_operator(self, operator):
        """ replace the operator and recompute the coarse operators """
        self.operator = operator
        self.grid[0].set_A(operator.A)
        for lev in range(1, self.nlevs):
            A = coarsenmatrix(self.grid[lev-1], self.grid[lev])
            self.grid[lev].set_A(A)

# ----------------------------------------
    def Vcycle(self, lev1):
        deepest_lev = self.nlevs-1
        for lev in range(lev1, deepest_lev):
            if lev > lev1:
                self.x[lev][:, :] = 0.
            self.grid[lev].smooth(self.x[lev], self.b[lev], self.npre)
            self.grid[lev].residual(self.x[lev], self.b[lev], self.r[lev])
            # the residual will be the RHS on the next grid
            finetocoarse(self.grid[lev], self.grid[lev+1],
                         self.r[lev], self.b[lev+1])

        # at the coarsest level we simply smooth, exact solution is not required
        lev = deepest_lev
        if lev > lev1:
            self.x[lev][:, :] = 0.
        self.grid[lev].smooth(self.x[lev], self.b[lev], self.ndeepest)

        for lev in range(deepest_lev-1, lev1-1, -1):
            coarsetofine(self.grid[lev+1], self.grid[lev],
                         self.x[lev+1], self.r[lev])
            self.x[lev] += self.r[lev]
            self.grid[lev].smooth(self.x[lev], self.b[lev], self.npost)

# ----------------------------------------
    def Fcycle(self, lev1):
        # push the RHS down on all grids
        deepest_lev = self.nlevs-1
        for lev in range(lev1, deepest_lev):
            finetocoarse(self.grid[lev], self.grid[lev+1],
                         self.b[lev], self.b[lev+1])

        # start solving the pb on the coarsest grid
        lev = deepest_lev
        self.x[lev][:, :] = 0.
        self.grid[lev].smooth(self.x[lev], self.b[lev], self.ndeepest)

        # pull the solution up
        for lev in range(deepest_lev-1, lev1-1, -1):
            coarsetofine(self.grid[lev+1], self.grid[lev],
                         self.x[lev+1], self.x[lev])
            # improve the solution by applying one or two Vcycle (down from this level)
            for k in range(self.nvcyc):
                # nvcyc == 2 corresponds to a W-cycle
                self.Vcycle(lev)

# ----------------------------------------
    def solve(self, x, b):
        """ driver to solve A*x=b
        x is the first guess, b the right hand side

        x is modified in place, return the number of iterations
        and the final relative residual"""

        if self.operator is None:
            raise ValueError('the multigrid solver has no operator,'
                             ' call set_operator first')

        g = self.grid[0]
        g.fill(x)
        normeb = g.norm(b)
        if normeb == 0.:
            # the operator is not singular: zero forcing has
            # the trivial solution
            x[:, :] = 0.
            return 0, 0.

        nite, res = self.cycles[self.cycle](x, b, normeb)

        if (self.myrank == 0) and (res > self.tol):
            print('Warning: multigrid did not converge,'
                  ' ite = %i / res = %.2e' % (nite, res))
        g.fill(x)
        return nite, res

# ----------------------------------------
    def Fsolve(self, x, b, normeb):
        """ iterate F-cycles on the residual equation """
        g = self.grid[0]
        g.residual(x, b, self.b[0])
        res0 = g.norm(self.b[0])/normeb
        res = res0
        nite = 0
        nite_diverge = 0
        # improve the solution until one of this condition is met
        while (nite < self.maxite) and (res0 > self.tol):
            self.Fcycle(0)
            x += self.x[0]
            g.residual(x, b, self.b[0])

            res = g.norm(self.b[0])/normeb
            conv = res0/res

            res0 = res
            nite += 1
            if (self.myrank == 0) and self.verbose:
                print(' ite = {} / res = {:.2e} / conv = {:8.4f}'.format(
                    nite, res, conv))

            if (conv < 1):
                nite_diverge += 1

            if (nite_diverge > self.nite_diverge):
                if (self.myrank == 0):
                    print('solver is not converging')
                break
        return nite, res

# ----------------------------------------
    def Vsolve(self, x, b, normeb):
        """ iterate V-cycles on the full equation """
        g = self.grid[0]
        self.x[0][:, :] = x
        self.b[0][:, :] = b
        g.residual(x, b, self.r[0])
        res0 = g.norm(self.r[0])/normeb
        res = res0

        nite = 0
        nite_diverge = 0
        while (nite < self.maxite) and (res0 > self.tol):
            self.Vcycle(0)
            g.residual(self.x[0], self.b[0], self.r[0])

            res = g.norm(self.r[0])/normeb
            conv = res0/res

            res0 = res
            nite += 1
            if (self.myrank == 0) and self.verbose:
                print(' ite = %i / res = %g / conv = %g' % (nite, res, conv))

            if (conv < 1):
                nite_diverge += 1

            if (nite_diverge > self.nite_diverge):
                if (self.myrank == 0):
                    print('solver is not converging')
                break

        x[:, :] = self.x[0]
        return nite, res

# ----------------------------------------
    def precondition(self, r, z):
        """ z = one V-cycle applied to r, starting from zero """
        self.x[0][:, :] = 0.
        self.b[0][:, :] = r
        self.Vcycle(0)
        z[:, :] = self.x[0]

    def pcgsolve(self, x, b, normeb):
        """ conjugate gradient preconditioned by a V-cycle

        the V-cycle is symmetric (same number of Jacobi sweeps before
        and after the coarse grid correction) so the preconditioner
        has the symmetry required by the conjugate gradient"""
        g = self.grid[0]
        rr = self.rr
        p = self.p
        q = self.q
        z = self.z

        g.residual(x, b, rr)
        res = g.norm(rr)/normeb
        nite = 0
        if res <= self.tol:
            return nite, res

        self.precondition(rr, z)
        p[:, :] = z
        rz = g.inner(rr, z)

        while (nite < self.maxite) and (res > self.tol):
            g.apply(p, q)
            alpha = rz/g.inner(p, q)
            x += alpha*p
            rr -= alpha*q

            res = g.norm(rr)/normeb
            nite += 1
            if (self.myrank == 0) and self.verbose:
                print(' ite = %i / res = %.2e' % (nite, res))
            if res <= self.tol:
                break

            self.precondition(rr, z)
            rznew = g.inner(rr, z)
            beta = rznew/rz
            rz = rznew
            p *= beta
            p += z
        return nite, res

# ----------------------------------------
    def print_timers(self):
        c1 = 0
        c2 = 0
        print('----------------------------------------------------------')
        for lev in range(self.nlevs):
            tt = self.grid[lev].time
            comp = tt['smooth']+tt['res']+tt['norm'] + \
                tt['interpolate']+tt['restrict']
            comm = tt['halo']+tt['reduce']
            c1 += comp
            c2 += comm
            print('%2i / comp =%5.3f / comm =%5.3f / total=%5.3f' %
                  (lev, comp, comm, comp+comm))

        print('----------------------------------------------------------')
        print('total      %5.3f /       %5.3f /       %5.3f' %
              (c1, c2, c1+c2))
        print('----------------------------------------------------------')
        for lev in range(self.nlevs):
            cc = self.grid[lev].ncalls
            print('%2i / nsmooth = %4i / nres = %4i/ nhalos = %4i' %
                  (lev, cc['smooth'], cc['res'], cc['halo']))
        print('----------------------------------------------------------')
