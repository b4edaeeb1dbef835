from dataclasses import dataclass, field

import numpy as np

from psoswarm.pso import util_pso

N_PARTICLES = 30
N_ITERATIONS = 100
DIM_SPACE = 3
LOWER = -5.0
UPPER = 5.0
W_INERTIA_START = 0.9 # favours exploration
W_INERTIA_END = 0.4 # favours exploitation
W_COGN = 2.0
W_SOCI = 2.0

UNINITIALIZED = 'uninitialized'
RUNNING = 'running'
COMPLETED = 'completed'


@dataclass
class OptimizationResult:
    g_best_pos: np.ndarray
    g_best_val: float
    n_iterations: int
    history: list = field(default_factory=list)
    mean_distance: list = field(default_factory=list)
    w_inertia: list = field(default_factory=list)


class Optimizer:
    """Runs a fixed number of PSO iterations on a swarm it owns.

    Each iteration evaluates the particles, moves them and records the global best value. The optimizer goes
    through the states uninitialized -> running -> completed and a completed optimizer cannot be restarted:
    build a new one with a fresh random source instead.
    """
    def __init__(self, num_particles=N_PARTICLES, n_iterations=N_ITERATIONS, dim_space=DIM_SPACE, lower=LOWER, upper=UPPER,
                 w_inertia_start=W_INERTIA_START, w_inertia_end=W_INERTIA_END, w_cogn=W_COGN, w_soci=W_SOCI, rng=None, verbose=True):
        if num_particles < 1:
            raise ValueError(f"num_particles must be positive, got {num_particles}")
        if n_iterations < 0:
            raise ValueError(f"n_iterations must not be negative, got {n_iterations}")
        if lower > upper:
            raise ValueError(f"lower bound {lower} is greater than upper bound {upper}")
        self.num_particles = num_particles
        self.n_iterations = n_iterations
        self.dim_space = dim_space
        self.lower = lower
        self.upper = upper
        self.w_inertia_start = w_inertia_start
        self.w_inertia_end = w_inertia_end
        self.w_cogn = w_cogn # personal
        self.w_soci = w_soci # global
        self.rng = rng if rng is not None else np.random.default_rng()
        self.verbose = verbose

        self.swarm = None
        self.iteration = 0
        self.state = UNINITIALIZED
        self.finished = False # set once optimize() has returned a result
        self.history = {'global_best_val': [], 'mean_distance': [], 'w_inertia': []}

    def initialize(self):
        if self.state != UNINITIALIZED:
            raise RuntimeError(f"Optimizer is {self.state}, a new run requires a new optimizer")
        self.swarm = util_pso.Swarm()
        self.swarm.initialize(self.num_particles, self.dim_space, self.lower, self.upper, self.rng)
        self.state = RUNNING if self.n_iterations > 0 else COMPLETED

    def step(self):
        if self.state != RUNNING:
            raise RuntimeError(f"Cannot step an optimizer that is {self.state}")
        self.swarm.evaluate()
        w_inertia = self.swarm.update_velocities_and_positions(
            iteration=self.iteration,
            n_iterations=self.n_iterations,
            w_inertia_start=self.w_inertia_start,
            w_inertia_end=self.w_inertia_end,
            w_cogn=self.w_cogn,
            w_soci=self.w_soci,
            lower=self.lower,
            upper=self.upper,
            rng=self.rng
        )
        d_euc = self.swarm.mean_distance()
        self.history['global_best_val'].append(self.swarm.g_best_val)
        self.history['mean_distance'].append(d_euc)
        self.history['w_inertia'].append(w_inertia)
        self.iteration += 1
        if self.verbose:
            print(f'Iteration: {self.iteration}, mean euclidean distance: {d_euc}, global best value: {self.swarm.g_best_val}')
        if self.iteration == self.n_iterations:
            self.state = COMPLETED

    def optimize(self):
        if self.finished:
            raise RuntimeError("Optimizer already completed, a new run requires a new optimizer")
        if self.state == UNINITIALIZED:
            self.initialize()
        while self.state == RUNNING:
            self.step()
        self.finished = True
        return self.result()

    def result(self):
        if self.swarm is None:
            raise RuntimeError("Optimizer has not been initialized")
        return OptimizationResult(
            g_best_pos=self.swarm.g_best_pos,
            g_best_val=self.swarm.g_best_val,
            n_iterations=self.iteration,
            history=list(self.history['global_best_val']),
            mean_distance=list(self.history['mean_distance']),
            w_inertia=list(self.history['w_inertia'])
        )
