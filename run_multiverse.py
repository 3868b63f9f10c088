"""
Driver script: seed a multiverse, evolve it, fork branches and report Pattern DNA
"""

import argparse
import json
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
from tqdm import tqdm

from src.multiverse import (
    MultiverseError,
    MultiverseRegistry,
    AnalysisSettings,
    Grid,
    analyze,
    parse_rule,
    sonification_metrics,
    encode
)
from src.multiverse.patterns import centered
from src.utils.config import load_config, validate_config, MultiverseConfig
from src.utils.logger import setup_logger


MODES = {
    'quick': {'steps': 50, 'universes': 2, 'fork_every': 20, 'branch_steps': 20},
    'debug': {'steps': 10, 'universes': 1, 'fork_every': 5, 'branch_steps': 5},
}


def build_registry(config: MultiverseConfig, rng: np.random.Generator, pattern: Optional[str] = None) -> MultiverseRegistry:
    """Create the seed universes described by the configuration."""
    registry = MultiverseRegistry(history_capacity=config.history['capacity'])
    rules = parse_rule(config.rules['default'])

    for i in range(config.run['universes']):
        if pattern:
            grid = centered(pattern, config.grid['width'], config.grid['height'])
        else:
            grid = Grid.random(config.grid['width'], config.grid['height'],
                               density=config.grid['seed_density'], rng=rng)
        registry.create(grid=grid, rules=rules, name=f"Universe {i + 1}")

    return registry


def run_multiverse(config: MultiverseConfig, logger, pattern: Optional[str] = None) -> Dict[str, Any]:
    """
    Drive the registry for the configured number of steps.

    The active universe is advanced one generation at a time and forked
    every ``fork_every`` generations with mutated rules; the remaining
    universes then advance ``branch_steps`` generations in parallel.

    Returns:
        Report dictionary with one entry per universe
    """
    rng = np.random.default_rng(config.run.get('seed'))
    settings = AnalysisSettings(
        window=config.analysis['window'],
        sample_size=config.analysis['sample_size'],
        variance_divisor=config.analysis['variance_divisor']
    )

    registry = build_registry(config, rng, pattern)
    active = registry.active
    steps = config.run['steps']
    fork_every = config.run.get('fork_every') or 0

    logger.info(f"Driving {active.name} for {steps} generations ({active.rules})")

    for _ in tqdm(range(steps), desc=f"Evolving {active.name}"):
        active.advance()

        if fork_every and active.generation % fork_every == 0:
            branch_id = registry.fork(active.id, at_generation=active.generation)
            branch = registry.get(branch_id)
            branch.evolve_rules(rng=rng, mutation_rate=config.rules.get('mutation_rate', 0.1))
            logger.info(f"Forked {branch.name} with rules {branch.rules}")

    # Every other universe evolves on the thread pool
    others = [u.id for u in registry if u.id != active.id]
    if others:
        registry.advance_all(steps=config.run.get('branch_steps', steps), universe_ids=others,
                             max_workers=config.run.get('max_workers'), verbose=True)

    report = {}
    for universe in registry:
        dna = analyze(universe, settings)
        sound = sonification_metrics(universe)
        report[universe.id] = {
            'name': universe.name,
            'parent_id': universe.parent_id,
            'forked_at': universe.metadata.forked_at,
            'generation': universe.generation,
            'rules': universe.rules.notation,
            'population': universe.grid.population,
            'dna': dna.to_dict(),
            'density': sound.density,
            'population_delta': sound.population_delta,
            'encoded': encode(universe)
        }
        logger.info(f"{universe.name:30} gen {universe.generation:5d}  "
                    f"{dna.classification.value:10} sym {dna.symmetry:5.1f}  "
                    f"stab {dna.stability:5.1f}  ent {dna.entropy:5.1f}")

    return report


def main():
    """Main entry point with command line arguments."""
    parser = argparse.ArgumentParser(description='Evolve a multiverse of life-like automata')
    parser.add_argument('--mode', choices=['full', 'quick', 'debug'], default='full',
                        help='Run size (default: full)')
    parser.add_argument('--config', default='configs/multiverse.yaml',
                        help='YAML configuration file (created with defaults if missing)')
    parser.add_argument('--rule', help='Rule preset name or B/S notation overriding the config')
    parser.add_argument('--pattern', help='Seed every universe with a named pattern instead of noise')
    parser.add_argument('--seed', type=int, help='Random seed')
    parser.add_argument('--output', help='Write the JSON report to this path')
    parser.add_argument('--log-dir', default='logs', help='Directory for log files')

    args = parser.parse_args()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    # Package loggers live under "src", so they share these handlers
    logger = setup_logger("src", log_file=str(Path(args.log_dir) / f"multiverse_{timestamp}.log"))

    raw_config = load_config(args.config)
    config = MultiverseConfig.from_dict(raw_config)
    if not validate_config(config.to_dict()):
        logger.error(f"Invalid configuration: {args.config}")
        sys.exit(1)

    if args.mode in MODES:
        config.run.update(MODES[args.mode])
    if args.rule:
        config.rules['default'] = args.rule
    if args.seed is not None:
        config.run['seed'] = args.seed

    start_time = time.time()

    try:
        report = run_multiverse(config, logger, pattern=args.pattern)
    except MultiverseError as e:
        logger.error(f"Run failed: {e}")
        sys.exit(1)

    duration = time.time() - start_time
    logger.info(f"Evolved {len(report)} universes in {duration:.1f}s")

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, 'w') as f:
            json.dump(report, f, indent=2)
        logger.info(f"Report written to {output}")


if __name__ == "__main__":
    main()
