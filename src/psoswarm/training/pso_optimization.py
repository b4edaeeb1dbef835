# -----------------------------------
# Author
#   psoswarm developers
# Script description
#   Maximize the three weights recommendation function through PSO and plot the convergence curve
# Date
#   18/10/2026
# -----------------------------------

import argparse
import os
import pickle
import sys
import time
from datetime import datetime

import yaml

from psoswarm.pso import util_optimizer
from psoswarm.utils import util_general
from psoswarm.utils import util_report

RUN_MODULE = 'pso_optimization'

TRAINER_PSO_KEYS = {
    'n_particles': 'num_particles',
    'n_iterations': 'n_iterations',
    'dim_space': 'dim_space',
    'lower': 'lower',
    'upper': 'upper',
    'w_inertia_start': 'w_inertia_start',
    'w_inertia_end': 'w_inertia_end',
    'w_cognitive': 'w_cogn',
    'w_social': 'w_soci',
}


def get_args(argv=None):
    parser = argparse.ArgumentParser(description="Particle Swarm Optimization of the recommendation weights")
    parser.add_argument("-f", "--cfg_file", help="Path of Configuration File", type=str, default=None)
    parser.add_argument("-i", "--id_exp", help="Id of the experiment, next free id if omitted", type=int, default=None)
    parser.add_argument("--seed", help="Seed of the random source", type=int, default=None)
    parser.add_argument("--n_particles", help="Number of particles of the swarm", type=int, default=None)
    parser.add_argument("--n_iterations", help="Number of PSO iterations", type=int, default=None)
    parser.add_argument("--reports_dir", help="Root directory of the run reports", type=str, default=None)
    parser.add_argument("-q", "--quiet", help="Do not print every iteration", action="store_true")
    return parser.parse_args(argv)


def default_config():
    return {
        'id_exp': None,
        'seed': None,
        'data': {'reports_dir': './reports'},
        'trainer_pso': {
            'n_particles': util_optimizer.N_PARTICLES,
            'n_iterations': util_optimizer.N_ITERATIONS,
            'dim_space': util_optimizer.DIM_SPACE,
            'lower': util_optimizer.LOWER,
            'upper': util_optimizer.UPPER,
            'w_inertia_start': util_optimizer.W_INERTIA_START,
            'w_inertia_end': util_optimizer.W_INERTIA_END,
            'w_cognitive': util_optimizer.W_COGN,
            'w_social': util_optimizer.W_SOCI,
        },
    }


def build_config(args):
    cfg = default_config()
    if args.cfg_file is not None:
        cfg_file = util_general.load_config(args.cfg_file)
        if not isinstance(cfg_file, dict):
            raise ValueError(f"Configuration file {args.cfg_file} must contain a mapping")
        sections = {}
        for section in ['trainer_pso', 'data']:
            sections[section] = cfg_file.get(section) or {} # an empty section loads as None
            if not isinstance(sections[section], dict):
                raise ValueError(f"Section {section} of {args.cfg_file} must be a mapping")
        unknown = set(sections['trainer_pso']) - set(TRAINER_PSO_KEYS)
        if unknown:
            raise ValueError(f"Unknown trainer_pso keys in {args.cfg_file}: {sorted(unknown)}")
        cfg['trainer_pso'].update(sections['trainer_pso'])
        cfg['data'].update(sections['data'])
        for key in ['id_exp', 'seed']:
            if key in cfg_file:
                cfg[key] = cfg_file[key]

    if args.id_exp is not None:
        cfg['id_exp'] = args.id_exp
    if args.seed is not None:
        cfg['seed'] = args.seed
    if args.n_particles is not None:
        cfg['trainer_pso']['n_particles'] = args.n_particles
    if args.n_iterations is not None:
        cfg['trainer_pso']['n_iterations'] = args.n_iterations
    if args.reports_dir is not None:
        cfg['data']['reports_dir'] = args.reports_dir
    return cfg


def run(argv=None):
    args = get_args(argv)
    cfg = build_config(args)

    # Parameters are validated before anything is written to disk
    rng = util_general.seed_all(cfg['seed'])
    trainer_pso = cfg['trainer_pso']
    optimizer = util_optimizer.Optimizer(
        **{TRAINER_PSO_KEYS[key]: value for key, value in trainer_pso.items()},
        rng=rng,
        verbose=not args.quiet
    )

    # Submit run
    reports_root = cfg['data']['reports_dir']
    run_id = cfg['id_exp']
    if run_id is None:
        run_id = util_general.get_next_run_id_local(reports_root, RUN_MODULE)
    run_name = "{0:05d}--{1}".format(run_id, RUN_MODULE)
    reports_dir = util_general.create_dir(os.path.join(reports_root, run_name))
    with open(os.path.join(reports_dir, 'configuration.yaml'), 'w') as f:
        yaml.dump(cfg, f, default_flow_style=False)

    with util_general.Logger(file_name=os.path.join(reports_dir, 'log.txt'), file_mode="w", should_flush=True):
        print('Python %s on %s' % (sys.version, sys.platform))
        print("Hello!", datetime.now().strftime("%d/%m/%Y, %H:%M:%S"))
        print(f"Run directory: {reports_dir}")

        print(f"Seed: {cfg['seed']}")
        for key, value in trainer_pso.items():
            print(f"{key}: {value}")

        print("Start PSO")
        tik = time.time()
        result = optimizer.optimize()
        tok = time.time()
        print(f"Optimization time: {util_general.format_time(tok - tik)}")

        util_report.print_results(result.g_best_val, result.g_best_pos)
        with open(os.path.join(reports_dir, 'history.pkl'), 'wb') as f:
            pickle.dump(optimizer.history, f)

        print("Plot training results")
        history_particles, _ = optimizer.swarm.checkpoint()
        plots = [
            (util_report.plot_pso_convergence, dict(plot_training_dir=reports_dir, global_best_val=result.history)),
            (util_report.plot_training, dict(history=optimizer.history, plot_training_dir=reports_dir)),
            (util_report.plot_features_last_iteration, dict(plot_training_dir=reports_dir, history_particles=history_particles, dim_space=optimizer.dim_space)),
        ]
        # a failed plot does not prevent the others from being written
        for plot_fun, kwargs in plots:
            try:
                plot_fun(**kwargs)
            except util_report.ArtifactWriteFailure as e:
                print(f"An error occurred while writing the plot: {e}", file=sys.stderr)

    return result


def main(argv=None):
    run(argv)
    return 0


if __name__ == "__main__":
    sys.exit(main())
