# This package holds the in-memory selection state and its presentation helpers.
