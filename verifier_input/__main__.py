"""Command line entry point.

    python -m verifier_input prepare annotated_proof.json -o input.json
    python -m verifier_input fri-steps --n-steps 32768 --degree-bound 64
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from verifier_input.config import CodecConfig
from verifier_input.errors import VerifierInputError
from verifier_input.fri_steps import calculate_fri_step_list, fri_degree, read_n_steps
from verifier_input.prepare import prepare_verifier_input_file

logger = logging.getLogger("verifier_input")


def _cmd_prepare(args: argparse.Namespace) -> int:
    config = CodecConfig.from_json(str(args.config)) if args.config else CodecConfig()
    if args.no_verify_challenges:
        config = replace(config, verify_challenges=False)

    vi = prepare_verifier_input_file(
        str(args.annotated_proof),
        str(args.output),
        fact_topologies_path=str(args.fact_topologies) if args.fact_topologies else None,
        config=config,
    )
    logger.info("Proof params length: %d", len(vi.proof_params))
    logger.info("Proof length: %d", len(vi.proof))
    logger.info("Public input length: %d", len(vi.public_input))
    return 0


def _cmd_fri_steps(args: argparse.Namespace) -> int:
    n_steps = args.n_steps
    if n_steps is None:
        if args.public_input is None:
            raise VerifierInputError("either --n-steps or --public-input is required")
        with open(args.public_input) as f:
            n_steps = read_n_steps(json.load(f))
        logger.info("Read n_steps from %s: %d", args.public_input, n_steps)

    steps = calculate_fri_step_list(n_steps, args.degree_bound)
    logger.info(
        "n_steps=%d degree_bound=%d fri_degree=%d",
        n_steps, args.degree_bound, fri_degree(n_steps, args.degree_bound),
    )
    sys.stdout.write(json.dumps(steps) + "\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cairo-verifier-input",
        description="Convert annotated Cairo STARK proofs into on-chain verifier input",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    prepare = sub.add_parser("prepare", help="Build input.json from an annotated proof")
    prepare.add_argument("annotated_proof", type=Path, help="Path to annotated_proof.json")
    prepare.add_argument(
        "-o", "--output", type=Path, default=Path("input.json"), help="Output path (default: input.json)"
    )
    prepare.add_argument(
        "--fact-topologies", type=Path, default=None, help="Path to fact_topologies.json (bootloader runs)"
    )
    prepare.add_argument("--config", type=Path, default=None, help="JSON file with CodecConfig overrides")
    prepare.add_argument(
        "--no-verify-challenges",
        action="store_true",
        help="Trust annotated z/alpha without replaying the verifier PRNG",
    )
    prepare.set_defaults(func=_cmd_prepare)

    fri = sub.add_parser("fri-steps", help="Compute a FRI step list for a trace length")
    fri.add_argument("--n-steps", type=int, default=None, help="Trace length")
    fri.add_argument("--public-input", type=Path, default=None, help="AIR public input JSON to read n_steps from")
    fri.add_argument("--degree-bound", type=int, required=True, help="FRI last layer degree bound")
    fri.set_defaults(func=_cmd_fri_steps)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (VerifierInputError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
