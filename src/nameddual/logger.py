"""Contains the logger of the nameddual modules.

``nameddual`` logs through the standard :mod:`logging` library and only emits
``DEBUG`` records, e.g. when a set of variables is declared. The library never
installs handlers; calling applications configure ``nameddual.logger.nameddual_logger``
the usual way::

    import logging

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )
"""

import logging

logger_name = "nameddual"
nameddual_logger = logging.getLogger(logger_name)
