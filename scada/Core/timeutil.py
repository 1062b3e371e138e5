# scada/Core/timeutil.py

import time


def current_timestamp() -> int:
    """UTC UNIX time in whole seconds; the unit of every timestamp column."""
    return int(time.time())
