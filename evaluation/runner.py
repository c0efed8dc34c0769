from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv

from utils.config import Config
from utils.load_config import load_config
from utils.logger import get_logger, init_logger
from utils.observability.otel_setup import setup_telemetry

from .dataset import load_dataset
from .evaluate import evaluate, format_eval_summary
from .scorers import import_object, resolve_scorer

logger = get_logger(__name__)

DEFAULT_SCORER = "exact_match"


def _resolve(args: argparse.Namespace) -> tuple[Any, List[Any]]:
    task = import_object(args.task)
    if not callable(task):
        raise ValueError(f"Task is not callable: {args.task}")
    scorers = [resolve_scorer(spec) for spec in (args.scorer or [DEFAULT_SCORER])]
    return task, scorers


def cmd_run(args: argparse.Namespace) -> int:
    config = load_config(args.config) if args.config else Config()
    init_logger(args.config)

    try:
        task, scorers = _resolve(args)
    except (ImportError, AttributeError, ValueError) as e:
        logger.error("resolution_failed", task=args.task, scorers=args.scorer, error=str(e))
        return 2

    provider = None
    if not args.no_telemetry:
        tel = config.telemetry
        provider = setup_telemetry(
            tel.endpoint,
            tel.project,
            auth=tel.auth,
            batch=tel.batch,
            auto_instrument=tel.auto_instrument,
            headers=tel.headers or None,
        )

    dataset_path = Path(args.dataset)

    def data() -> List[Any]:
        rows = load_dataset(dataset_path)
        return rows[: args.limit] if args.limit else rows

    try:
        summary = evaluate(
            args.name or dataset_path.stem,
            data,
            task,
            scorers,
            emit_scores=config.evaluation.emit_scores and not args.no_emit_scores,
        )
    except (OSError, ValueError) as e:
        logger.error("dataset_load_failed", dataset=str(dataset_path), error=str(e))
        return 2
    finally:
        if provider is not None:
            provider.shutdown()

    print(format_eval_summary(summary))
    return 0


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="genai-evals")
    sub = ap.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("run")
    r.add_argument("--dataset", required=True)
    r.add_argument("--task", required=True, help="module:function called with each item's input")
    r.add_argument("--scorer", action="append", help="built-in scorer name or module:attribute (repeatable)")
    r.add_argument("--name", required=False)
    r.add_argument("--config", required=False)
    r.add_argument("--limit", type=int, required=False)
    r.add_argument("--no-emit-scores", action="store_true")
    r.add_argument("--no-telemetry", action="store_true")

    return ap


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    argv = argv if argv is not None else sys.argv[1:]
    ap = build_argparser()
    args = ap.parse_args(argv)
    if args.cmd == "run":
        return cmd_run(args)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
