import os
import random
import re
import sys

import numpy as np
import yaml


class Logger(object):
    """Redirect stdout and stderr to a file while still printing them to the console."""

    def __init__(self, file_name=None, file_mode="w", should_flush=True):
        self.file = None
        if file_name is not None:
            self.file = open(file_name, file_mode)
        self.should_flush = should_flush
        self.stdout = sys.stdout
        self.stderr = sys.stderr
        sys.stdout = self
        sys.stderr = self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def write(self, text):
        if len(text) == 0:
            return
        if self.file is not None:
            self.file.write(text)
        self.stdout.write(text)
        if self.should_flush:
            self.flush()

    def flush(self):
        if self.file is not None:
            self.file.flush()
        self.stdout.flush()

    def close(self):
        self.flush()
        # if using multiple loggers, prevent closing in wrong order
        if sys.stdout is self:
            sys.stdout = self.stdout
        if sys.stderr is self:
            sys.stderr = self.stderr
        if self.file is not None:
            self.file.close()
            self.file = None


def create_dir(outdir):
    os.makedirs(outdir, exist_ok=True)
    return outdir


def get_next_run_id_local(run_dir_root, module_name):
    """Reads all directory names in a given directory (non-recursive) and returns the next (increasing) run id"""
    if not os.path.isdir(run_dir_root):
        return 0
    run_id = 0
    pattern = re.compile(r"^(\d+)--" + re.escape(module_name) + r"$")
    for dir_name in os.listdir(run_dir_root):
        match = pattern.match(dir_name)
        if match is not None:
            run_id = max(run_id, int(match.group(1)) + 1)
    return run_id


def seed_all(seed):
    """Seed the global generators and return a Generator to hand to the optimizer."""
    random.seed(seed)
    np.random.seed(seed)
    return np.random.default_rng(seed)


def format_time(seconds):
    s = int(np.rint(seconds))
    if s < 60:
        return "{0}s".format(s)
    elif s < 60 * 60:
        return "{0}m {1:02}s".format(s // 60, s % 60)
    else:
        return "{0}h {1:02}m {2:02}s".format(s // (60 * 60), (s // 60) % 60, s % 60)


def load_config(cfg_file):
    with open(cfg_file) as file:
        cfg = yaml.load(file, Loader=yaml.FullLoader)
    return cfg if cfg is not None else {}
