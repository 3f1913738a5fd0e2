import sys

from loguru import logger

VERBOSE_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | '
    '<level>{level: <8}</level> | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | '
    '<level>{message}</level>'
)
BRIEF_FORMAT = (
    '<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | '
    '<level>{message}</level>'
)


def configure_logging(verbose: bool = False) -> None:
    """Replace loguru's default sink with a stderr sink at INFO or DEBUG."""
    logger.remove()
    logger.add(
        sys.stderr,
        format=VERBOSE_FORMAT if verbose else BRIEF_FORMAT,
        level='DEBUG' if verbose else 'INFO',
        colorize=True,
    )
    logger.debug('Verbose logging enabled')
