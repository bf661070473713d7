from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import typer
from typer.main import get_command

from octidx.utils.atomic import atomic_write_json

from .common import build_tree, load_points, resolve_config, tree_summary, validate_point

app = typer.Typer(add_completion=False, no_args_is_help=True, rich_markup_mode="rich")


def _cloud_arg():
    return typer.Argument(
        ..., exists=True, file_okay=True, dir_okay=False, readable=True, help="ASCII PLY or XYZ file."
    )


@app.command("build")
def cli_build(
    cloud: Path = _cloud_arg(),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", help="Maximum tree depth."),
    scale: Optional[float] = typer.Option(None, "--scale", "-s", help="Coordinate multiplier."),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="auto, ply or xyz."),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, file_okay=True, dir_okay=False, readable=True
    ),
    out: Optional[Path] = typer.Option(None, "--out", "-o", dir_okay=False),
    full: bool = typer.Option(False, "--full/--summary-only", help="Include every node in --out."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    cfg = resolve_config(config, depth=depth, scale=scale, fmt=fmt, verbose=verbose)
    pts = load_points(cloud, cfg)
    tree = build_tree(pts, cfg)

    summary = tree_summary(tree, full=full)
    typer.echo(
        f"[octree] points={summary['num_points']} nodes={summary['num_nodes']} "
        f"leaves={summary['num_leaves']} max_depth={summary['max_depth']}"
    )
    o = ", ".join(f"{v:.6g}" for v in summary["origin"])
    typer.echo(f"[octree] origin=({o}) size={summary['size']:.6g}")
    if out is not None:
        atomic_write_json(out, summary)
        typer.echo(f"[octree] Saved summary: {out}")


@app.command("query")
def cli_query(
    cloud: Path = _cloud_arg(),
    point: str = typer.Option(..., "--point", "-p", help="Query coordinates 'x,y,z' (after scaling)."),
    depth: Optional[int] = typer.Option(None, "--depth", "-d"),
    scale: Optional[float] = typer.Option(None, "--scale", "-s"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, file_okay=True, dir_okay=False, readable=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    p = validate_point(point)
    cfg = resolve_config(config, depth=depth, scale=scale, fmt=fmt, verbose=verbose)
    tree = build_tree(load_points(cloud, cfg), cfg)

    leaf = tree.index(p)
    if leaf is None:
        typer.echo(f"[query] {p} not found")
        raise typer.Exit(code=1)

    o = ", ".join(f"{v:.6g}" for v in leaf.origin.tolist())
    typer.echo(
        f"[query] {p} found: leaf depth={leaf.depth} origin=({o}) size={leaf.size:.6g} "
        f"matches={len(leaf.matching_points(p))} leaf_points={len(leaf.point_list)}"
    )


@app.command("delete")
def cli_delete(
    cloud: Path = _cloud_arg(),
    point: str = typer.Option(..., "--point", "-p", help="Coordinates 'x,y,z' to delete (after scaling)."),
    depth: Optional[int] = typer.Option(None, "--depth", "-d"),
    scale: Optional[float] = typer.Option(None, "--scale", "-s"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, file_okay=True, dir_okay=False, readable=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    p = validate_point(point)
    cfg = resolve_config(config, depth=depth, scale=scale, fmt=fmt, verbose=verbose)
    tree = build_tree(load_points(cloud, cfg), cfg)

    nodes_before = tree.num_nodes()
    points_before = tree.num_points()
    if not tree.delete_point(p):
        typer.echo(f"[delete] {p} not found")
        raise typer.Exit(code=1)

    typer.echo(
        f"[delete] {p} deleted: points {points_before} -> {tree.num_points()}, "
        f"nodes {nodes_before} -> {tree.num_nodes()}"
    )


@app.command("render")
def cli_render(
    cloud: Path = _cloud_arg(),
    out: Path = typer.Option(Path("octree.png"), "--out", "-o", dir_okay=False),
    depth: Optional[int] = typer.Option(None, "--depth", "-d"),
    scale: Optional[float] = typer.Option(None, "--scale", "-s"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, file_okay=True, dir_okay=False, readable=True
    ),
    leaves_only: Optional[bool] = typer.Option(None, "--leaves-only/--all-nodes"),
    show_points: Optional[bool] = typer.Option(None, "--points/--no-points"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    from octidx.visualization.cubes import render_octree

    cfg = resolve_config(config, depth=depth, scale=scale, fmt=fmt, verbose=verbose)
    pts = load_points(cloud, cfg)
    tree = build_tree(pts, cfg)

    only_leaves = cfg.render.leaves_only if leaves_only is None else bool(leaves_only)
    with_points = cfg.render.show_points if show_points is None else bool(show_points)
    n = render_octree(
        tree,
        out,
        points=pts if with_points else None,
        leaves_only=only_leaves,
        dpi=cfg.render.dpi,
        elev=cfg.render.elev,
        azim=cfg.render.azim,
    )
    typer.echo(f"[render] Saved {n} cube(s): {out}")


def run(argv: Sequence[str] | None = None, *, prog_name: str | None = None) -> None:
    cmd = get_command(app)
    cmd.main(args=None if argv is None else list(argv), prog_name=prog_name)


def main(argv: list[str] | None = None) -> None:
    run(argv, prog_name="octidx")


if __name__ == "__main__":
    main()
