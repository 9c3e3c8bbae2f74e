# This package holds the identifier policy and the immutable catalog entities.
# It exists so the decoder and the selection store agree on one way of naming channels and packages.
