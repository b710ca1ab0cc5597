#!/usr/bin/env python
"""Development server with hot reload support."""

import logging

from contractmark import main

if __name__ in {"__main__", "__mp_main__"}:
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s: %(message)s",
    )
    # Silence noisy loggers
    logging.getLogger("watchfiles").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    main()
