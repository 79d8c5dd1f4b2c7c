"""Contains the name for the logger of fdmkit modules.

``fdmkit`` uses a simple logging system based on the
`Logging <https://docs.python.org/3/library/logging.html>`__ standard library.
Logging messages are grouped in different levels:

* ``DEBUG``: Details of the numerical choices made along the way, such as
    coefficient cache misses, perturbed magnitude estimates and the step
    sizes picked by the step-size optimizer.
* ``WARNING``: An indication that something unexpected
    happened which may require attention, e.g. an extrapolation that ran
    out of evaluations before reaching its tolerance.

By default, only messages of level ``WARNING`` are displayed.

Calling applications can configure the format and log level of the displayed messages
by `Configuring Logging <https://docs.python.org/3/howto/logging.html#configuring-logging>`__
for ``fdmkit.logger.fdmkit_logger``, e.g.::

    >>> import logging
    >>> logging.basicConfig(
    ...     level=logging.DEBUG,
    ...     format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    ... )
"""
import logging

logger_name = "fdmkit"
fdmkit_logger = logging.getLogger(logger_name)
