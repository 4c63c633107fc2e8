from freesurf.gmg.level import shifted


def implicit_free_surface_right_hand_side(rhs, grid, g, dt, fluxes, eta):
    """ right hand side of the implicit free surface equation

        rhs = (δx(Δy Qu) + δy(Δx Qv) - Az η/Δt) / (g Δt)

    fluxes = (Qu, Qv) are the vertically integrated velocities at x-faces
    and y-faces, their halo should be filled. Only the interior of rhs
    is set, land cells get zero """
    qu, qv = fluxes
    nh = grid.nh
    flux_divergence = grid.dy*(shifted(qu, nh, 0, 1)-shifted(qu, nh, 0, 0)) \
        + grid.dx*(shifted(qv, nh, 1, 0)-shifted(qv, nh, 0, 0))

    rhs[grid.interior] = grid.msk[grid.interior] * \
        (flux_divergence-grid.Az*eta[grid.interior]/dt)/(g*dt)
    return rhs
