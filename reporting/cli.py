#!/usr/bin/env python3
"""
CLI for generating Proposta Comercial PDFs.

Usage:
    python -m reporting.cli sample
    python -m reporting.cli generate <proposal_json>

Examples:
    # Generate sample proposal for testing
    python -m reporting.cli sample

    # Generate from a JSON proposal file (same fields as the API)
    python -m reporting.cli generate proposals/cliente.json -o out/
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from core.models import create_sample_proposal
from core.validation import InputValidationError, build_proposal
from utils.config import Config

from .layout import ProposalLayout
from .pdf_generator import ProposalPDFGenerator, RenderFailure
from .theme import VARIANTS, get_variant


def _generator(config: Config, variant_key=None) -> ProposalPDFGenerator:
    variant = get_variant(
        variant_key or config.proposal_variant,
        logo_path=config.logo_path,
        **config.company_overrides(),
    )
    return ProposalPDFGenerator(ProposalLayout(variant=variant))


def _output_dir(args, config: Config) -> Path:
    return args.output_dir or Path(config.data_dir) / "proposals"


def cmd_sample(args, config: Config) -> int:
    """Generate a sample proposal for testing."""
    print("Generating sample proposal...")

    record = create_sample_proposal()
    result = _generator(config, args.variant).generate_report(record, _output_dir(args, config))

    print(f"Proposal generated: {result.path} ({result.page_count} pages)")
    return 0


def cmd_generate(args, config: Config) -> int:
    """Generate a proposal from a JSON file."""
    input_path = Path(args.proposal_file)

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    print(f"Loading proposal from: {input_path}")

    try:
        data = json.loads(input_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        return 1

    try:
        record = build_proposal(data)
    except InputValidationError as e:
        print("Error: Invalid proposal data:", file=sys.stderr)
        for error in e.errors:
            print(f"  - {error}", file=sys.stderr)
        return 1

    print(f"Generating proposal for: {record.client_name}")
    try:
        result = _generator(config, args.variant).generate_report(record, _output_dir(args, config))
    except RenderFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(f"Proposal generated: {result.path} ({result.page_count} pages)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Proposta Comercial - Solar Proposal PDF Generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m reporting.cli sample
    python -m reporting.cli generate proposals/cliente.json

Output:
    Proposals are saved to: $DATA_DIR/proposals/proposta_<Nome_do_Cliente>.pdf
        """,
    )
    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=None,
        help="Directory for generated PDFs",
    )
    parser.add_argument(
        "--variant",
        default=None,
        choices=sorted(VARIANTS),
        help="Template variant (defaults to PROPOSAL_VARIANT)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sample_parser = subparsers.add_parser(
        "sample",
        help="Generate a sample proposal",
    )
    sample_parser.set_defaults(func=cmd_sample)

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a proposal from a JSON file",
    )
    gen_parser.add_argument(
        "proposal_file",
        help="Path to JSON proposal file",
    )
    gen_parser.set_defaults(func=cmd_generate)

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    config = Config.load()
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
