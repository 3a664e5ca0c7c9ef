#!/usr/bin/env python3
"""
Simulate Geometric Brownian Motion price paths.

Prints the final-price envelope across paths and the statistics of the
median path. Parameters not given on the command line come from the 'gbm'
section of config/settings.yaml.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import click

from riskdesk.config import get_section_defaults
from riskdesk.logging import LogContext, configure_logging
from riskdesk.simulate import GBMParameters, ParameterError, simulate_multiple_gbm


@click.command()
@click.option('--initial-price', type=float, default=None, help='Starting price S0')
@click.option('--mu', type=float, default=None, help='Annual drift (0.08 = 8%)')
@click.option('--sigma', type=float, default=None, help='Annual volatility (0.2 = 20%)')
@click.option('--delta-t', type=float, default=None, help='Time step in years (1/252 = daily)')
@click.option('--horizon', type=float, default=None, help='Simulated time in years')
@click.option('--fat-tail', type=float, default=None, help='Student-t blend factor in [0, 1]')
@click.option('--mr-speed', type=float, default=None, help='Mean reversion speed (0 disables)')
@click.option('--mr-level', type=float, default=None, help='Mean reversion price level')
@click.option('--paths', type=int, default=None, help='Number of simulated paths')
@click.option('--seed', type=int, default=None, help='Random seed for reproducible runs')
@click.option('--output', type=click.Path(dir_okay=False), default=None,
              help='Write the percentile envelope to this CSV file')
def main(initial_price, mu, sigma, delta_t, horizon, fat_tail, mr_speed, mr_level, paths, seed, output):
    """
    Run a GBM price simulation.

    Example:
        python scripts/simulate_gbm.py --mu 0.1 --sigma 0.25 --paths 500 --seed 7
    """
    log_settings = get_section_defaults('logging')
    configure_logging(level=log_settings['level'], console=log_settings['console'], file=log_settings['file'])

    values = get_section_defaults('gbm')
    overrides = {
        'initial_price': initial_price,
        'mu': mu,
        'sigma': sigma,
        'delta_t': delta_t,
        'time_horizon': horizon,
        'fat_tail_factor': fat_tail,
        'mean_reversion_speed': mr_speed,
        'mean_reversion_level': mr_level,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    n_paths = values['n_simulations'] if paths is None else paths

    params = GBMParameters.from_dict(values)
    try:
        with LogContext(phase="gbm", seed=seed):
            result = simulate_multiple_gbm(params, n_simulations=n_paths, seed=seed)
    except ParameterError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Simulated {n_paths} paths of {params.n_steps} steps")
    click.echo("=" * 60)
    click.echo("FINAL PRICE ENVELOPE")
    click.echo("=" * 60)
    for key, curve in result.percentiles.curves.items():
        click.echo(f"{key:>4}: {curve[-1]:.2f}")

    finals = [sim.stats.final_price for sim in result.simulations]
    median_index = sorted(range(len(finals)), key=finals.__getitem__)[len(finals) // 2]
    median_stats = result.simulations[median_index].stats

    click.echo("=" * 60)
    click.echo("MEDIAN PATH")
    click.echo("=" * 60)
    click.echo(f"Total Return:  {median_stats.total_return:.2f}%")
    click.echo(f"Max Drawdown:  {median_stats.max_drawdown:.2f}%")
    click.echo(f"Volatility:    {median_stats.volatility:.2f}%")
    click.echo(f"Sharpe Ratio:  {median_stats.sharpe_ratio:.3f}")
    click.echo(f"Sortino Ratio: {median_stats.sortino_ratio:.3f}")

    if output:
        result.to_frame().to_csv(output, index=False)
        click.echo(f"✓ Envelope saved to {output}")


if __name__ == '__main__':
    main()
