"""Console logging for the bridge.

Core modules log through the standard logging module; this handler renders
their records with click styling so daemon output matches the CLI's look.
"""

import logging

import click

_GLYPHS = {
    logging.DEBUG: ('  ', 'white'),
    logging.INFO: ('✓ ', 'green'),
    logging.WARNING: ('⚠ ', 'yellow'),
    logging.ERROR: ('✗ ', 'red'),
    logging.CRITICAL: ('✗ ', 'red'),
}


class ClickHandler(logging.Handler):
    """Logging handler that writes coloured records via click.echo."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            glyph, colour = _GLYPHS.get(record.levelno, ('', None))
            click.echo(
                click.style(glyph + message, fg=colour, dim=record.levelno <= logging.DEBUG),
                err=record.levelno >= logging.WARNING,
            )
        except Exception:
            self.handleError(record)


def configure_logging(verbose: bool = False) -> logging.Handler:
    """Install the click handler on the root logger.

    verbose=True  -> debug records from the bridge, with logger names
    verbose=False -> info and above, message only
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, ClickHandler):
            root.removeHandler(handler)

    handler = ClickHandler()
    if verbose:
        handler.setFormatter(logging.Formatter('[%(name)s] %(message)s'))
    else:
        handler.setFormatter(logging.Formatter('%(message)s'))

    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Third-party libraries are chatty at debug level
    for name in ('aiocoap', 'zeroconf', 'pyhap'):
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)
    return handler
