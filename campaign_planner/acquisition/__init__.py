# This package implements the resilient data-acquisition pipeline.
# It exists so callers get targeting data and channel packages from the remote API or, failing that, bundled snapshots.
# The modules separate transport, decoding, local lookup, and orchestration to keep each failure mode testable.
