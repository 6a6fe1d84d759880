"""CLI entrypoint for follow/flee runs.

This module owns CLI argument parsing and config resolution. All domain logic
lives in the extracted modules:

- ``followflee.config``             – configuration dataclasses
- ``followflee.domain``             – payoff, movement, ledger, replacement, driver
- ``followflee.simulation.engine``  – ``run_simulation`` engine
- ``followflee.metrics``            – per-generation population summaries
"""

from __future__ import annotations

import argparse
import json
import logging
import math
from dataclasses import asdict
from pathlib import Path

from followflee.config.constants import (
    COOPERATOR_FRACTION,
    DENSITY,
    GRID_HEIGHT,
    GRID_WIDTH,
    NUM_GENERATIONS,
    REPLACEMENT_RATE,
    STEPS_PER_GENERATION,
)
from followflee.config.types import (
    LatticeConfig,
    ModelConfig,
    PopulationConfig,
    ReplacementMode,
    RunConfig,
)
from followflee.simulation.engine import run_simulation

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Value coercion helpers
# ---------------------------------------------------------------------------


def _coerce_bool(raw: object, key: str) -> bool:
    """Coerce raw value to bool with strict string-check."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"{key} must be a boolean value")


def _coerce_int(raw: object, key: str) -> int:
    """Coerce raw value to int; rejects booleans and non-integer floats."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be an integer value")
    if isinstance(raw, float):
        if raw != int(raw):
            raise ValueError(f"{key} must be an integer value, got {raw!r}")
        return int(raw)
    if isinstance(raw, (int, str)):
        return int(raw)
    raise ValueError(f"{key} must be an integer value")


def _coerce_float(raw: object, key: str) -> float:
    """Coerce raw value to float; rejects booleans."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be a float value")
    if isinstance(raw, (int, float, str)):
        return float(raw)
    raise ValueError(f"{key} must be a float value")


def _coerce_optional_int(raw: object, key: str) -> int | None:
    if raw is None:
        return None
    return _coerce_int(raw, key)


def _get_val(cli_val: object, key: str, file_cfg: dict[str, object], default: object) -> object:
    """CLI > file > default resolution."""
    if cli_val is not None:
        return cli_val
    return file_cfg.get(key, default)


def _get_bool(cli_val: bool | None, key: str, file_cfg: dict[str, object], default: bool) -> bool:
    """CLI > file > default resolution for boolean flags."""
    return _coerce_bool(_get_val(cli_val, key, file_cfg, default), key)


def _get_int(cli_val: int | None, key: str, file_cfg: dict[str, object], default: int) -> int:
    """CLI > file > default resolution for integer values."""
    return _coerce_int(_get_val(cli_val, key, file_cfg, default), key)


def _get_float(
    cli_val: float | None, key: str, file_cfg: dict[str, object], default: float
) -> float:
    """CLI > file > default resolution for float values."""
    return _coerce_float(_get_val(cli_val, key, file_cfg, default), key)


def _parse_rep_mode(raw: str) -> ReplacementMode:
    """Parse replacement mode from CLI/config."""
    try:
        return ReplacementMode(raw)
    except ValueError as exc:
        valid = ", ".join(mode.value for mode in ReplacementMode)
        raise ValueError(f"rep-mode must be one of {valid}") from exc


def _json_safe(value: object) -> object:
    """Replace NaN floats with ``None`` so the summary stays valid JSON."""
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Run a follow/flee simulation")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (CLI args override file values)",
    )
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--neighbours", type=int, choices=[4, 8], default=None)
    parser.add_argument("--periodic", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--density", type=float, default=None)
    parser.add_argument("--cooperator-fraction", type=float, default=None)
    parser.add_argument("--actions", type=int, default=None, help="fixed genome for every agent")
    parser.add_argument(
        "--rep-mode",
        type=str,
        choices=[mode.value for mode in ReplacementMode],
        default=None,
    )
    parser.add_argument("--rep-rate", type=float, default=None)
    parser.add_argument("--steps-per-gen", type=int, default=None)
    parser.add_argument(
        "--rank-by-score",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Rank agents by score before replacement (--no-rank-by-score keeps current order)",
    )
    parser.add_argument("--generations", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--history",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include every generation's stats in the printed summary",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    return parser


def build_run_config(args: argparse.Namespace, file_cfg: dict[str, object]) -> RunConfig:
    """Resolve CLI arguments and config-file values into a :class:`RunConfig`."""
    lattice = LatticeConfig(
        width=_get_int(args.width, "width", file_cfg, GRID_WIDTH),
        height=_get_int(args.height, "height", file_cfg, GRID_HEIGHT),
        neighbours=_get_int(args.neighbours, "neighbours", file_cfg, 4),
        periodic=_get_bool(args.periodic, "periodic", file_cfg, True),
    )
    population = PopulationConfig(
        density=_get_float(args.density, "density", file_cfg, DENSITY),
        cooperator_fraction=_get_float(
            args.cooperator_fraction, "cooperator_fraction", file_cfg, COOPERATOR_FRACTION
        ),
        actions=_coerce_optional_int(_get_val(args.actions, "actions", file_cfg, None), "actions"),
    )
    rep_mode_raw = str(
        _get_val(args.rep_mode, "rep_mode", file_cfg, ReplacementMode.SIMPLE_BD.value)
    )
    model = ModelConfig(
        rep_mode=_parse_rep_mode(rep_mode_raw).value,
        rep_rate=_get_float(args.rep_rate, "rep_rate", file_cfg, REPLACEMENT_RATE),
        steps_per_gen=_get_int(args.steps_per_gen, "steps_per_gen", file_cfg, STEPS_PER_GENERATION),
        rank_by_score=_get_bool(args.rank_by_score, "rank_by_score", file_cfg, True),
    )
    missing = model.missing()
    if missing:
        raise ValueError(f"invalid model attributes: {', '.join(missing)}")
    return RunConfig(
        lattice=lattice,
        population=population,
        model=model,
        generations=_get_int(args.generations, "generations", file_cfg, NUM_GENERATIONS),
        seed=_get_int(args.seed, "seed", file_cfg, 0),
    )


# ---------------------------------------------------------------------------
# Main CLI
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for a single run.

    Supports ``--config path/to/config.json`` for reproducibility. CLI
    arguments override config-file values; config-file values override
    built-in defaults. Prints a JSON summary to stdout.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    file_cfg: dict[str, object] = {}
    if args.config is not None:
        try:
            file_cfg = json.loads(Path(args.config).read_text())
        except FileNotFoundError:
            parser.error(f"Config file not found: {args.config}")
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {args.config}: {exc}")

    try:
        config = build_run_config(args, file_cfg)
    except ValueError as exc:
        parser.error(str(exc))
    include_history = _get_bool(args.history, "history", file_cfg, False)

    logger.info("starting run with seed %d", config.seed)
    result = run_simulation(config)

    summary: dict[str, object] = {
        "seed": config.seed,
        "generations": config.generations,
        "lattice": asdict(config.lattice),
        "population": asdict(config.population),
        "model": config.model.to_attrs(),
        "final": {k: _json_safe(v) for k, v in asdict(result.history[-1]).items()},
    }
    if include_history:
        summary["history"] = [
            {k: _json_safe(v) for k, v in asdict(stats).items()} for stats in result.history
        ]
    print(json.dumps(summary, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
