import argparse
import sys
from pathlib import Path

from .config import DEFAULT_SITEMAP_URL, ConfigError, GenerateOptions, load_config
from .generator import generate_llms_full_txt, generate_llms_txt
from .logger import get_logger, set_log_level
from .progress import ProgressChannel

logger = get_logger(__name__)


def _load_options(args) -> GenerateOptions:
    options = GenerateOptions()
    if getattr(args, "config", None):
        config_path = Path(args.config)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        options = load_config(config_path)

    return options.merged(
        sitemap_url=args.url,
        exclude_paths=args.exclude_path,
        include_paths=args.include_path,
        replace_title=args.replace_title,
        title=args.title,
        description=args.description,
        concurrency=args.concurrency,
        scheduler=args.scheduler,
        timeout=args.timeout,
    )


def _emit(document: str, output) -> None:
    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(document, encoding="utf-8")
        logger.info(f"Wrote {path}")
    else:
        sys.stdout.write(document + "\n")
        sys.stdout.flush()


def _run(args, generate) -> int:
    try:
        options = _load_options(args)
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    progress = ProgressChannel()
    progress.subscribe(lambda event: logger.debug(str(event)))

    try:
        document = generate(options, progress=progress)
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    _emit(document, args.output)
    return 0


def cmd_gen(args):
    """Generate llms.txt (one link per page, grouped by section)."""
    return _run(args, generate_llms_txt)


def cmd_gen_full(args):
    """Generate llms-full.txt (full markdown content for each page)."""
    return _run(args, generate_llms_full_txt)


def _add_generate_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "url",
        nargs="?",
        default=None,
        help=f"Sitemap URL (default: {DEFAULT_SITEMAP_URL})",
    )
    p.add_argument(
        "-ep",
        "--exclude-path",
        nargs="+",
        action="extend",
        metavar="GLOB",
        help="Path glob(s) to exclude from generation (default: none).",
    )
    p.add_argument(
        "-ip",
        "--include-path",
        nargs="+",
        action="extend",
        metavar="GLOB",
        help="Path glob(s) to include in generation (default: all).",
    )
    p.add_argument(
        "-rt",
        "--replace-title",
        nargs="+",
        action="extend",
        metavar="CMD",
        help="Title substitution(s) as s/pattern/replacement/flags (default: none).",
    )
    p.add_argument("-t", "--title", help="Set title (default: root page title).")
    p.add_argument(
        "-d",
        "--description",
        help="Set description (default: root page description).",
    )
    p.add_argument(
        "-c",
        "--concurrency",
        type=int,
        help="Maximum number of concurrent connections (default: 5).",
    )
    p.add_argument(
        "--scheduler",
        choices=("chunked", "pool"),
        help="chunked: wait for each batch before the next (default); "
        "pool: keep every worker busy.",
    )
    p.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds (default: 20).",
    )
    p.add_argument(
        "--config",
        help="YAML file with default values for these options.",
    )
    p.add_argument(
        "-o",
        "--output",
        help="Write the document to this file instead of stdout.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every processed URL.",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="llmstxt",
        description="Generate llms.txt documentation indexes from a website sitemap.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_gen = subparsers.add_parser("gen", help="Generate llms.txt.")
    _add_generate_arguments(p_gen)
    p_gen.set_defaults(func=cmd_gen)

    p_full = subparsers.add_parser(
        "gen-full",
        help="Generate llms-full.txt (full markdown content for each page).",
    )
    _add_generate_arguments(p_full)
    p_full.set_defaults(func=cmd_gen_full)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1

    if getattr(args, "verbose", False):
        set_log_level("DEBUG")

    return int(func(args)) or 0


if __name__ == "__main__":
    raise SystemExit(main())
