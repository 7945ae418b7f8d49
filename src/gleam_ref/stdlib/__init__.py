"""Built-in primitive procedures, registered via gleam_ref.runtime on import."""

from . import (  # noqa: F401
    chars,
    control,
    environments,
    equivalence,
    host,
    interaction,
    io,
    lists,
    numbers,
    strings,
    vectors,
)
