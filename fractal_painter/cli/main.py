"""
Command-line interface for fractal drawing.

Frames are drawn in memory; the commands report frame size, timing and a
digest of the pixel buffer so that runs can be compared.
"""

import click
import sys
import hashlib
from pathlib import Path
from typing import Optional, Tuple
import logging
import time

from .. import __version__
from ..api import PainterConfig, draw_from_config
from ..core.fractal_types import FractalRegistry
from ..rendering.coloring import TechniqueRegistry
from ..acceleration.multiprocessing import BACKENDS, get_default_worker_count
from ..io.config import ConfigManager

logger = logging.getLogger(__name__)


def parse_zoom(value: Optional[str]) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
    """Parse an "x0,y0,x1,y1" pixel rectangle."""
    if not value:
        return None
    parts = [float(x.strip()) for x in value.split(',')]
    if len(parts) != 4:
        raise ValueError("Zoom must have exactly 4 coordinates")
    return (parts[0], parts[1]), (parts[2], parts[3])


def buffer_digest(buffer) -> str:
    return hashlib.sha256(buffer.tobytes()).hexdigest()


def _fail(ctx, error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    Fractal Painter - parallel escape-time fractal drawing tool.

    Draw Julia and Newton fractal frames into BGRA pixel buffers using a
    pool of worker threads or processes.
    """
    # Setup logging
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Fractal Painter v{__version__}")
        click.echo(f"Python: {sys.version}")
        click.echo(f"CPU workers: {get_default_worker_count()}")

        if ctx.invoked_subcommand is None:
            sys.exit(0)

    # Store global options in context
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


@main.command()
@click.option('--width', '-w', type=int, help='Frame width')
@click.option('--height', '-h', type=int, help='Frame height')
@click.option('--algorithm', '-a', help='Fractal algorithm name')
@click.option('--technique', '-t', 'techniques', multiple=True,
              help='Coloring technique (repeat to combine several)')
@click.option('--combine', 'combination', help="Combination: 'first', 'average' or 'weighted'")
@click.option('--weight', 'weights', type=float, multiple=True,
              help='Weight per technique for the weighted combination')
@click.option('--color', type=float, help='Color parameter')
@click.option('--motion', type=float, help='Motion parameter')
@click.option('--max-iter', 'max_iterations', type=int, help='Maximum iterations')
@click.option('--workers', type=int, help='Number of workers')
@click.option('--backend', type=click.Choice(BACKENDS), help='Parallel backend')
@click.option('--zoom', type=str, help='Pixel rectangle to zoom into: "x0,y0,x1,y1"')
@click.pass_context
def draw(ctx, zoom, **kwargs):
    """
    Draw a single frame and report its digest.
    """
    try:
        overrides = dict(kwargs)
        overrides['techniques'] = list(kwargs['techniques']) or None
        overrides['weights'] = list(kwargs['weights']) or None

        config = ConfigManager().load(ctx.obj.get('config_file'), overrides)
        zoom_rect = parse_zoom(zoom)

        click.echo(f"Drawing {config.algorithm} frame {config.width}x{config.height}...")
        start_time = time.time()

        buffer, painter = draw_from_config(config, zoom_rect)

        draw_time = time.time() - start_time
        stats = painter.last_stats
        click.echo(f"Draw complete: {draw_time:.2f}s "
                   f"({stats.workers} workers, {stats.backend} backend)")
        click.echo(f"Buffer: {buffer.size:,} bytes")
        click.echo(f"SHA-256: {buffer_digest(buffer)}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.option('--size', type=str, default='200x150', help='Benchmark frame size (widthxheight)')
@click.option('--iterations', type=int, default=100, help='Maximum iterations for benchmark')
@click.option('--workers', 'worker_counts', type=int, multiple=True,
              help='Worker count to test (repeatable; default 1 and CPU count)')
@click.option('--backend', type=click.Choice(BACKENDS), default='thread', help='Parallel backend')
@click.pass_context
def benchmark(ctx, size, iterations, worker_counts, backend):
    """
    Benchmark drawing performance with different worker counts.
    """
    try:
        # Parse size
        try:
            width, height = map(int, size.split('x'))
        except ValueError:
            click.echo("Error: Invalid size format. Use 'widthxheight'", err=True)
            sys.exit(1)

        if not worker_counts:
            worker_counts = sorted({1, get_default_worker_count()})

        click.echo("Fractal Painter Performance Benchmark")
        click.echo(f"Frame size: {width}x{height} ({width*height:,} pixels)")
        click.echo(f"Max iterations: {iterations}")
        click.echo("")

        base = ConfigManager().load(ctx.obj.get('config_file'),
                                    {'width': width, 'height': height,
                                     'max_iterations': iterations, 'backend': backend})

        digests = set()
        click.echo("Performance Results:")
        for workers in worker_counts:
            config = PainterConfig.from_dict(dict(base.to_dict(), workers=workers))
            buffer, painter = draw_from_config(config)
            stats = painter.last_stats
            digests.add(buffer_digest(buffer))
            click.echo(f"  {workers} workers: {stats.elapsed_seconds:.2f}s "
                       f"({stats.pixels_per_second:,.0f} pixels/sec)")

        click.echo("")
        if len(digests) == 1:
            click.echo("All buffers identical")
        else:
            click.echo("Error: buffers differ between worker counts", err=True)
            sys.exit(1)

    except Exception as e:
        _fail(ctx, e)


@main.command('list-algorithms')
def list_algorithms():
    """List available fractal algorithms."""
    click.echo("Available fractal algorithms:")
    for name, description in FractalRegistry.list_algorithms().items():
        click.echo(f"  {name:<12} {description}")


@main.command('list-techniques')
def list_techniques():
    """List available coloring techniques."""
    click.echo("Available coloring techniques:")
    for name, description in TechniqueRegistry.list_techniques().items():
        click.echo(f"  {name:<16} {description}")


@main.command('init-config')
@click.argument('output', type=click.Path())
@click.option('--force', is_flag=True, help='Overwrite an existing file')
@click.pass_context
def init_config(ctx, output, force):
    """
    Write a default configuration file.

    OUTPUT: Path of the JSON file to create
    """
    try:
        path = Path(output)
        if path.exists() and not force:
            click.echo(f"Error: {output} already exists (use --force to overwrite)", err=True)
            sys.exit(1)

        ConfigManager.save(PainterConfig(), path)
        click.echo(f"Configuration written to: {output}")

    except Exception as e:
        _fail(ctx, e)


if __name__ == '__main__':
    main()
