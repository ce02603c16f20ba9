"""CLI Interface Logic (argparse etc)"""

import argparse
import logging
from dataclasses import fields
from pathlib import Path

from docweave.internals.config.define_config import (
    BOOL_FIELDS,
    DocumentModel,
    PipelineDirection,
    UserConfig,
)
from docweave.orchestrator import run_pipeline

log = logging.getLogger("docweave")

# Help text for the paired --x / --no-x switches, keyed by UserConfig field
BOOL_FLAG_HELP = {
    "write_html": "Also save an HTML rendering of imported block documents",
    "extract_comments": "Extract Word comments and attach them to blocks",
    "infer_headings": "Promote unstyled, title-like paragraphs to headers",
    "preserve_run_formatting": "Keep run formatting (fonts, colors, bold...) as inline HTML",
    "split_line_breaks": "Split paragraphs with line breaks into one block per line",
}


def run() -> None:
    """Run CLI interface. Assumes startup.initialize_application() was already called."""
    args = parse_args()
    cfg = build_config_from_args(args)
    output_path = run_pipeline(cfg)
    log.info(f"Done. Output: {output_path}")


def build_parser() -> argparse.ArgumentParser:
    """The argument parser. Every UserConfig field has a flag."""
    parser = argparse.ArgumentParser(
        prog="docweave",
        description="Convert Word documents into editor block/node documents, and editor documents back into Word XML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Word document to block JSON (+ HTML)
  docweave --input-docx contract.docx

  # Word document to the nested node model
  docweave --input-docx contract.docx --model nodes

  # Saved block document back to Word XML
  docweave --input-json docweave_blocks.json

  # Use a config file, overriding one setting
  docweave --config settings.toml --no-infer-headings
        """,
    )

    # Config file (special - loads other values)
    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to TOML configuration file. See ~/Documents/docweave/configs/sample_config.toml after at least 1 run",
    )

    # Input/Output
    parser.add_argument(
        "--input-docx",
        type=str,
        dest="input_docx",
        metavar="PATH",
        help="Input Word document (.docx file); implies --direction docx2editor",
    )
    parser.add_argument(
        "--input-json",
        type=str,
        dest="input_json",
        metavar="PATH",
        help="Saved block or node document (.json file); implies --direction editor2wordxml",
    )
    parser.add_argument(
        "--output-folder",
        type=str,
        dest="output_folder",
        metavar="PATH",
        help="Output folder for converted files",
    )

    # Enums
    parser.add_argument(
        "--direction",
        type=str,
        choices=[d.value for d in PipelineDirection],
        help="Conversion direction (default: docx2editor)",
    )
    parser.add_argument(
        "--model",
        type=str,
        choices=[m.value for m in DocumentModel],
        help="Document model to produce or read (default: blocks)",
    )

    # Paired boolean switches
    for name in BOOL_FIELDS:
        flag = name.replace("_", "-")
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            f"--{flag}",
            action="store_true",
            dest=name,
            help=f"{BOOL_FLAG_HELP[name]} (default: enabled)",
        )
        group.add_argument(
            f"--no-{flag}",
            action="store_false",
            dest=name,
            help=f"Disable: {BOOL_FLAG_HELP[name].lower()}",
        )
    # None means "not given on the command line"
    parser.set_defaults(**{name: None for name in BOOL_FIELDS})

    _validate_args_match_config(parser)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments into a Namespace with one attribute per UserConfig field."""
    return build_parser().parse_args(argv)


def build_config_from_args(args: argparse.Namespace) -> UserConfig:
    """
    Build UserConfig from parsed arguments with proper priority.

    Priority order (highest to lowest):
    1. CLI arguments (if explicitly provided)
    2. Config file values (if --config provided)
    3. UserConfig defaults
    """
    if args.config:
        config_path = Path(args.config)
        log.info(f"Loading config from {config_path}")
        cfg = UserConfig.from_toml(config_path)
    else:
        cfg = UserConfig()

    # An input file picks its direction; an explicit --direction below still wins
    if args.input_docx is not None:
        cfg.input_docx = args.input_docx
        cfg.direction = PipelineDirection.DOCX_TO_EDITOR
    if args.input_json is not None:
        cfg.input_json = args.input_json
        cfg.direction = PipelineDirection.EDITOR_TO_WORDXML
    if args.output_folder is not None:
        cfg.output_folder = args.output_folder

    if args.direction is not None:
        cfg.direction = PipelineDirection(args.direction)
    if args.model is not None:
        cfg.model = DocumentModel(args.model)

    for name in BOOL_FIELDS:
        value = getattr(args, name)
        if value is not None:
            setattr(cfg, name, value)

    cfg.validate()
    return cfg


def _validate_args_match_config(parser: argparse.ArgumentParser) -> None:
    """
    Ensure all UserConfig fields have corresponding CLI arguments and vice versa.

    Raises:
        RuntimeError: If there's a mismatch between config fields and CLI args
    """
    config_fields = {f.name for f in fields(UserConfig)}

    excluded_args = {"help", "config"}
    arg_names = {action.dest for action in parser._actions if action.dest not in excluded_args}

    missing_in_args = config_fields - arg_names
    extra_in_args = arg_names - config_fields

    if missing_in_args:
        log.error("UserConfig fields must have a corresponding arg in cli.build_parser().")
        raise RuntimeError(
            f"CLI arguments missing for UserConfig fields: {missing_in_args}\n"
            "These config fields need corresponding arguments added to build_parser()"
        )

    if extra_in_args:
        log.error(
            "Unexpected CLI args that do not match UserConfig fields. Either add a UserConfig field "
            "or, for CLI-only args like --config, add the arg to excluded_args in _validate_args_match_config()."
        )
        raise RuntimeError(
            f"CLI arguments don't match UserConfig fields: {extra_in_args}\n"
            "Either remove these CLI args or add corresponding fields to UserConfig"
        )


def main() -> None:
    """Development entry point - run CLI directly with `python -m docweave.cli`"""
    from docweave import startup

    log = startup.initialize_application()
    try:
        run()
    except Exception:
        log.exception("Fatal error in CLI")
        raise


if __name__ == "__main__":
    main()
