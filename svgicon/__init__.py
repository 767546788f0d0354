"""Generate icon modules and index files from a tree of SVG files."""

from .converter import BatchConverter, DiscoveryError, run
from .normalizer import SvgNormalizer, normalize
from .optimizer import OptimizerOptions, SvgOptimizeError, optimize
from .template import compile_template

__version__ = "0.1.0"

__all__ = [
    "BatchConverter",
    "DiscoveryError",
    "OptimizerOptions",
    "SvgNormalizer",
    "SvgOptimizeError",
    "compile_template",
    "normalize",
    "optimize",
    "run",
]
