from __future__ import annotations

import argparse
import sys
from pathlib import Path

import yaml

from histobucket.bucketing import bucketing_section, build_bucketing
from histobucket.bucketing.base import validate_sample
from histobucket.utils.config import (
    ConfigError,
    apply_overrides,
    ensure_required_sections,
    load_config,
    parse_overrides,
    save_config,
)
from histobucket.utils.csv_logger import CSVLogger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the classification entrypoint."""
    p = argparse.ArgumentParser(description="Map samples to histogram bucket minimums")
    p.add_argument("--config", type=str, required=True)
    p.add_argument(
        "--override",
        type=str,
        nargs="*",
        default=[],
        help="Dotted key overrides, e.g. bucketing.buckets_per_magnitude=16",
    )
    p.add_argument("--samples", type=str, default="", help="Comma list or list format, e.g. [0,1,100]")
    p.add_argument("--samples_file", type=str, default=None, help="One integer sample per line")
    p.add_argument("--out_dir", type=str, default=None, help="Write classification CSV here")
    p.add_argument("--save_config", action="store_true", help="Also write resolved config.yaml to --out_dir")
    return p.parse_args(argv)


def _parse_samples(raw: str) -> list[int]:
    text = str(raw).strip()
    if not text:
        return []
    if text.startswith("["):
        loaded = yaml.safe_load(text)
        values = loaded if isinstance(loaded, list) else [loaded]
    else:
        values = [int(v) for v in text.split(",") if v.strip()]
    return [validate_sample(v) for v in values]


def _read_samples_file(path: str | Path) -> list[int]:
    samples: list[int] = []
    with Path(path).open("r", encoding="utf-8") as f:
        for line in f:
            text = line.split("#", 1)[0].strip()
            if text:
                samples.append(validate_sample(int(text)))
    return samples


def run(args: argparse.Namespace) -> list[tuple[int, int]]:
    """Resolve config, classify samples, and write optional outputs.

    Returns:
        ``(sample, bucket_minimum)`` pairs in input order.
    """
    cfg = load_config(args.config)
    if args.override:
        cfg = apply_overrides(cfg, parse_overrides(args.override))
    ensure_required_sections(cfg)
    bucketing = build_bucketing(cfg)

    samples = _parse_samples(args.samples)
    if args.samples_file:
        samples.extend(_read_samples_file(args.samples_file))

    rows = [(s, bucketing.sample_to_bucket_minimum(s)) for s in samples]
    for sample, minimum in rows:
        print(f"{sample}\t{minimum}")

    if args.out_dir:
        out_dir = Path(args.out_dir)
        csv_name = cfg.get("output", {}).get("csv_filename", "buckets.csv")
        logger = CSVLogger(out_dir / csv_name, fieldnames=["sample", "bucket_minimum"])
        logger.log_rows({"sample": s, "bucket_minimum": m} for s, m in rows)
        print(str(logger.path))
        if args.save_config:
            resolved = dict(cfg)
            resolved["bucketing"] = bucketing_section(bucketing)
            save_config(resolved, out_dir / "config.yaml")
            print(str(out_dir / "config.yaml"))
    elif args.save_config:
        raise ConfigError("--save_config requires --out_dir")

    return rows


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        run(args)
    except (ConfigError, yaml.YAMLError, ValueError, TypeError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
