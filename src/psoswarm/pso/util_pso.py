import itertools

import numpy as np
import pandas as pd

from psoswarm.pso import util_vector
from psoswarm.pso.util_objective import objective


def inertia_weight(iteration, n_iterations, w_inertia_start, w_inertia_end):
    """Linear decay from w_inertia_start (iteration 0) to w_inertia_end (iteration n_iterations)."""
    return w_inertia_start - (w_inertia_start - w_inertia_end) * iteration / n_iterations


# velocity allows particles to update their position over the iterations to find the global maximum
class Particle:
    def __init__(self, pos):
        self.pos = util_vector.as_vector(pos) # position of the particle in the search space
        self.vel = util_vector.zeros(len(self.pos))
        self.p_best_pos = self.pos
        self.p_best_val = objective(self.pos)
        self.history = [self.pos]
        self.history_vel = [self.vel]

    def update_velocity(self, w_inertia, w_cogn, w_soci, g_best_pos, r1, r2):
        inertia = util_vector.scale(self.vel, w_inertia)
        best_cogn = util_vector.scale(util_vector.subtract(self.p_best_pos, self.pos), w_cogn * r1) # personal
        best_soci = util_vector.scale(util_vector.subtract(g_best_pos, self.pos), w_soci * r2) # global
        self.vel = util_vector.add(util_vector.add(inertia, best_cogn), best_soci)
        self.history_vel.append(self.vel)

    def update_position(self, lower, upper):
        # only the position is kept inside the search space, velocity is left untouched
        self.pos = util_vector.clamp(util_vector.add(self.pos, self.vel), lower, upper)
        self.history.append(self.pos)


class Swarm:
    def __init__(self):
        self.swarm = []
        self.g_best_pos = None
        self.g_best_val = -np.inf
        self.initialized = False

    def _check_initialized(self):
        if not self.initialized:
            raise RuntimeError("Swarm must be initialized before evaluation or update")

    def initialize(self, num_particles, dim_space, lower, upper, rng):
        if self.initialized:
            raise RuntimeError("Swarm is already initialized, create a new one for a new run")
        for _ in range(num_particles):
            pos = lower + (upper - lower) * rng.random(dim_space)
            particle = Particle(pos)
            if particle.p_best_val > self.g_best_val:
                self.g_best_val = particle.p_best_val
                self.g_best_pos = particle.p_best_pos
            self.swarm.append(particle)
        self.initialized = True

    def evaluate(self):
        """update best personal value (cognitive) and best global value (social)"""
        self._check_initialized()
        for particle in self.swarm:
            fitness_value = objective(particle.pos) # Compute current fitness
            if fitness_value > particle.p_best_val:
                particle.p_best_val = fitness_value
                particle.p_best_pos = particle.pos
                if fitness_value > self.g_best_val:
                    self.g_best_val = fitness_value
                    self.g_best_pos = particle.pos

    def update_velocities_and_positions(self, iteration, n_iterations, w_inertia_start, w_inertia_end, w_cogn, w_soci, lower, upper, rng):
        """Update velocity and position of every particle, return the inertia weight used"""
        self._check_initialized()
        w_inertia = inertia_weight(iteration, n_iterations, w_inertia_start, w_inertia_end)
        for particle in self.swarm:
            r1 = rng.random()
            r2 = rng.random()
            particle.update_velocity(w_inertia, w_cogn, w_soci, self.g_best_pos, r1, r2)
            particle.update_position(lower, upper)
        return w_inertia

    def mean_distance(self):
        dist_euc = [np.linalg.norm(util_vector.subtract(p1.pos, p2.pos)) for p1, p2 in itertools.combinations(self.swarm, 2)]
        if not dist_euc:
            return 0.0
        return float(np.mean(dist_euc))

    def checkpoint(self):
        history_particles = {}
        history_particles_vel = {}
        for p_idx, particle in enumerate(self.swarm):
            history_particles[f'particle_{p_idx}'] = pd.DataFrame(particle.history)
            history_particles_vel[f'particle_{p_idx}'] = pd.DataFrame(particle.history_vel)
        return history_particles, history_particles_vel
