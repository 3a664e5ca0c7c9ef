#!/usr/bin/env python3
"""
Analyze a trade journal export.

Loads closed trades from a CSV file, prints the performance metrics and the
Monte Carlo and bootstrap outlooks. Defaults come from config/settings.yaml.
"""

import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import click
import pandas as pd

from riskdesk import (
    calculate_performance_metrics,
    conditional_value_at_risk,
    run_bootstrap_projection,
    run_monte_carlo,
    summarize_bootstrap,
    to_return_series,
    trades_from_frame,
    value_at_risk,
)
from riskdesk.config import get_section_defaults, load_settings, validate_settings
from riskdesk.logging import LogContext, configure_logging
from riskdesk.simulate import ParameterError


def _pick(option, default):
    """Command line value unless it was left out."""
    return default if option is None else option


def _tail_risk(returns, levels):
    """VaR and CVaR at each configured confidence level."""
    return {
        f"{level:g}": {
            'value_at_risk': value_at_risk(returns, level),
            'conditional_var': conditional_value_at_risk(returns, level),
        }
        for level in levels
    }


def _print_metrics(metrics, tail_risk):
    click.echo("=" * 60)
    click.echo("PERFORMANCE")
    click.echo("=" * 60)
    click.echo(f"Trades:              {metrics.total_trades}")
    click.echo(f"Period:              {metrics.strategy_duration_days:.1f} days")
    click.echo(f"Total Return:        {metrics.total_return:.2f}%")
    click.echo(f"Annualized Return:   {metrics.annualized_return:.2f}%")
    click.echo(f"Win Rate:            {metrics.global_win_rate:.1f}% "
               f"({metrics.win_rate_excluding_breakeven:.1f}% excl. break-even)")
    click.echo(f"Profit Factor:       {metrics.profit_factor:.2f}")
    click.echo(f"Max Drawdown:        {metrics.max_drawdown:.2f}%")
    click.echo(f"Sharpe Ratio:        {metrics.sharpe_ratio:.3f}")
    click.echo(f"Sortino Ratio:       {metrics.sortino_ratio:.3f}")
    for level, risk in tail_risk.items():
        click.echo(f"VaR / CVaR @ {level:<6}  {risk['value_at_risk']:.2f}% / {risk['conditional_var']:.2f}%")
    click.echo(f"Alpha:               {metrics.alpha:.2f}%")
    click.echo(f"Holding periods:     {metrics.duration_correlation}")


def _print_monte_carlo(result):
    click.echo("=" * 60)
    click.echo(f"MONTE CARLO ({result.n_simulations} paths x {result.n_trades} trades, "
               f"{'block' if result.block_resampling else 'iid'})")
    click.echo("=" * 60)
    if result.is_empty:
        click.echo("Not enough trades to simulate")
        return
    table = result.percentiles
    click.echo(f"Profit probability:  {result.profit_probability:.1f}%")
    click.echo(f"Drawdown risk:       {result.drawdown_risk:.1f}%")
    click.echo(f"Final return p5/p50/p95: {table.p5:.2f}% / {table.p50:.2f}% / {table.p95:.2f}%")
    drawdowns = result.statistics.max_drawdown_distribution
    click.echo(f"Max drawdown median/p95: {drawdowns.median:.2f}% / {drawdowns.p95:.2f}%")
    click.echo(f"Recovery rate:       {result.statistics.recovery_rate:.1f}%")


def _print_bootstrap(summary, projection):
    click.echo("=" * 60)
    click.echo(f"BOOTSTRAP ({summary.n_samples} samples)")
    click.echo("=" * 60)
    for name in ('final_returns', 'max_drawdowns', 'sharpe_ratios', 'win_rates', 'profit_factors'):
        dist = getattr(summary, name)
        label = name.replace('_', ' ').capitalize()
        click.echo(f"{label:<18} p5={dist.p5:.3f}  p50={dist.p50:.3f}  p95={dist.p95:.3f}")
    if not projection.is_empty:
        finals = projection.statistics.final_returns
        click.echo(f"Compounded return  p5={finals['p5']:.2f}%  p50={finals['p50']:.2f}%  p95={finals['p95']:.2f}%")


@click.command()
@click.option('--trades', 'trades_file', required=True, type=click.Path(exists=True, dir_okay=False),
              help='CSV export of closed trades')
@click.option('--benchmark', type=float, default=None, help='Benchmark return in percent over the same period')
@click.option('--simulations', type=int, default=None, help='Number of Monte Carlo paths')
@click.option('--sequence-length', type=int, default=None, help='Trades per simulated path')
@click.option('--block-size', type=int, default=None, help='Block length for block resampling')
@click.option('--iid', is_flag=True, help='Resample single trades instead of blocks')
@click.option('--seed', type=int, default=None, help='Random seed for reproducible runs')
@click.option('--skip-invalid', is_flag=True, help='Skip malformed rows instead of failing')
@click.option('--json', 'as_json', is_flag=True, help='Print results as JSON')
def main(trades_file, benchmark, simulations, sequence_length, block_size, iid, seed, skip_invalid, as_json):
    """
    Compute performance metrics and simulated outlooks for a trade journal.

    Example:
        python scripts/analyze_trades.py --trades data/trades.csv --seed 42
    """
    try:
        settings = load_settings()
    except FileNotFoundError:
        settings = {}

    is_valid, errors = validate_settings(settings)
    if not is_valid:
        for error in errors:
            click.echo(f"✗ Settings: {error}", err=True)
        sys.exit(1)

    log_settings = get_section_defaults('logging', settings)
    configure_logging(
        level=log_settings['level'],
        console=log_settings['console'] and not as_json,
        file=log_settings['file'],
    )

    metric_settings = get_section_defaults('metrics', settings)
    sim_settings = get_section_defaults('simulation', settings)
    boot_settings = get_section_defaults('bootstrap', settings)

    block_resampling = sim_settings['block_resampling'] and not iid

    try:
        frame = pd.read_csv(trades_file)
        trades = trades_from_frame(frame, skip_invalid=skip_invalid)
    except (ValueError, pd.errors.ParserError) as e:
        click.echo(f"✗ Error loading trades: {e}", err=True)
        sys.exit(1)

    if not as_json:
        click.echo(f"✓ Loaded {len(trades)} trades from {trades_file}")

    try:
        with LogContext(phase="metrics", seed=seed):
            metrics = calculate_performance_metrics(
                trades,
                benchmark_return=benchmark,
                risk_free_rate=metric_settings['risk_free_rate'],
            )
            tail_risk = _tail_risk(to_return_series(trades), metric_settings['var_confidence_levels'])

        with LogContext(phase="montecarlo", seed=seed, resampling='block' if block_resampling else 'iid'):
            outlook = run_monte_carlo(
                trades,
                n_simulations=_pick(simulations, sim_settings['n_simulations']),
                n_trades=_pick(sequence_length, sim_settings['n_trades']),
                block_resampling=block_resampling,
                block_size=_pick(block_size, sim_settings['block_size']),
                drawdown_threshold=sim_settings['drawdown_threshold'],
                n_display_paths=sim_settings['n_display_paths'],
                seed=seed,
            )

        with LogContext(phase="bootstrap", seed=seed):
            summary = summarize_bootstrap(
                trades,
                n_samples=boot_settings['n_simulations'],
                n_display_curves=boot_settings['n_display_curves'],
                seed=seed,
            )
            projection = run_bootstrap_projection(
                trades,
                n_simulations=boot_settings['n_simulations'],
                initial_capital=boot_settings['initial_capital'],
                n_display_curves=0,
                seed=seed,
            )
    except ParameterError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        metrics_dict = metrics.to_dict()
        metrics_dict.pop('equity_curve', None)
        payload = {
            'metrics': metrics_dict,
            'tail_risk': tail_risk,
            'monte_carlo': {
                key: value for key, value in outlook.to_dict().items()
                if key not in ('path_percentiles', 'simulation_paths')
            },
            'bootstrap': {
                key: value for key, value in summary.to_dict().items()
                if key != 'equity_curves'
            },
            'projection': projection.to_dict()['statistics'],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    _print_metrics(metrics, tail_risk)
    _print_monte_carlo(outlook)
    _print_bootstrap(summary, projection)
    click.echo("=" * 60)


if __name__ == '__main__':
    main()
