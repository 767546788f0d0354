"""CLI entrypoint for svgicon."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, ConfigError, SvgIconConfig, load_config
from .converter import BatchConverter, DiscoveryError
from .index import IndexEmitter
from .logging import configure_logging
from .normalizer import SvgNormalizer
from .optimizer import OptimizerOptions
from .template import load_template


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svgicon",
        usage="%(prog)s -s svgSourcePath -t targetPath [options]",
        description="Generate icon modules and index files from a tree of SVG files.",
    )
    parser.add_argument(
        "-s",
        dest="source",
        required=True,
        help="svg source path",
    )
    parser.add_argument(
        "-t",
        dest="target",
        required=True,
        help="generate icon path (cleared before every run)",
    )
    parser.add_argument(
        "--ext",
        default=None,
        help="generated file's extension (default: js)",
    )
    parser.add_argument(
        "--tpl",
        default=None,
        help="the template file which to generate icon files (default: bundled template)",
    )
    parser.add_argument(
        "--es6",
        action="store_true",
        default=None,
        help="use ES module `import` statements in index files instead of `require`",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"path to a {CONFIG_FILENAME} file (default: ./{CONFIG_FILENAME} when present)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="number of files converted in parallel",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug-level logs to this file.",
    )
    return parser


def _resolve(value: str | None, base: Path) -> Path | None:
    if value is None:
        return None
    path = Path(value).expanduser()
    return path if path.is_absolute() else base / path


def _effective_config(args: argparse.Namespace, cwd: Path) -> SvgIconConfig:
    config_path = _resolve(args.config, cwd) or cwd
    if args.config is not None and not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    config = load_config(config_path)
    if args.workers is not None and args.workers < 1:
        raise ConfigError("--workers must be at least 1")
    return config.merge(
        extension=args.ext,
        template_path=_resolve(args.tpl, cwd),
        es6=args.es6,
        workers=args.workers,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for svgicon."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    cwd = Path.cwd()
    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=_resolve(args.log_file, cwd),
    )
    try:
        config = _effective_config(args, cwd)
        template = load_template(config.template_path)
        converter = BatchConverter(
            _resolve(args.source, cwd),
            _resolve(args.target, cwd),
            template,
            config.extension,
            normalizer=SvgNormalizer(
                OptimizerOptions(id_prefix=config.id_prefix),
                default_size=config.default_size,
            ),
            index_emitter=IndexEmitter(config.extension, es6=config.es6),
            workers=config.workers,
        )
        report = converter.run()
    except ConfigError as exc:
        parser.exit(1, f"svgicon: configuration error: {exc}\n")
    except DiscoveryError as exc:
        parser.exit(1, f"svgicon: {exc}\n")

    summary = f"Generated {len(report.generated)} icons and {len(report.indexes)} index files"
    if report.failures:
        summary += f" ({len(report.failures)} failed, see errors above)"
    print(summary)


if __name__ == "__main__":
    main(sys.argv[1:])
